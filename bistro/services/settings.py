from __future__ import annotations

import logging
from typing import Any, Mapping

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from bistro.models.store_settings import GENERAL_SETTINGS_ID, StoreSettings
from bistro.services.store_events import emit_settings_updated

logger = logging.getLogger(__name__)

SETTINGS_FIELDS = ("is_open", "restaurant_name", "logo_url", "contact_email", "address", "currency")


def _load(db: Session) -> StoreSettings | None:
    return db.query(StoreSettings).filter(StoreSettings.id == GENERAL_SETTINGS_ID).first()


def get_settings(db: Session) -> StoreSettings:
    """The singleton settings row, created open on first access."""
    settings = _load(db)
    if settings:
        return settings

    settings = StoreSettings(id=GENERAL_SETTINGS_ID, is_open=True)
    db.add(settings)
    try:
        db.commit()
    except IntegrityError:
        # Another request created it first
        db.rollback()
        settings = _load(db)
        if settings is None:
            raise
        return settings
    db.refresh(settings)
    logger.info("store settings initialised")
    return settings


def is_store_open(db: Session) -> bool:
    return bool(get_settings(db).is_open)


def update_settings(db: Session, changes: Mapping[str, Any]) -> StoreSettings:
    """Merge-write: only the supplied fields change."""
    settings = get_settings(db)
    applied = {
        key: value
        for key, value in changes.items()
        if key in SETTINGS_FIELDS and not (key == "is_open" and value is None)
    }
    if not applied:
        return settings

    for key, value in applied.items():
        setattr(settings, key, value)
    db.commit()
    db.refresh(settings)

    if "is_open" in applied:
        logger.info("store is now %s", "open" if settings.is_open else "closed")
    emit_settings_updated()
    return settings


def settings_to_dict(settings: StoreSettings) -> dict[str, Any]:
    return {
        "id": settings.id,
        "is_open": bool(settings.is_open),
        "restaurant_name": settings.restaurant_name,
        "logo_url": settings.logo_url,
        "contact_email": settings.contact_email,
        "address": settings.address,
        "currency": settings.currency,
        "updated_at": settings.updated_at.isoformat() if settings.updated_at else None,
    }
