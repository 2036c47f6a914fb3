from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from bistro.core.database import get_db
from bistro.services.settings import get_settings, settings_to_dict, update_settings

router = APIRouter(prefix="/api/settings", tags=["settings"])


class SettingsUpdate(BaseModel):
    is_open: Optional[bool] = None
    restaurant_name: Optional[str] = None
    logo_url: Optional[str] = None
    contact_email: Optional[str] = None
    address: Optional[str] = None
    currency: Optional[str] = None


@router.get("")
def read_settings(db: Session = Depends(get_db)):
    return settings_to_dict(get_settings(db))


@router.patch("")
def patch_settings(payload: SettingsUpdate, db: Session = Depends(get_db)):
    return settings_to_dict(update_settings(db, payload.model_dump(exclude_unset=True)))
