from __future__ import annotations

from typing import Optional

from sqlalchemy.orm import Session

from bistro.core.request_context import get_actor
from bistro.models.order_audit_log import OrderAuditLog


def log_order_action(
    db: Session,
    *,
    order_id: str,
    action: str,
    from_value: Optional[str] = None,
    to_value: Optional[str] = None,
    actor: Optional[str] = None,
) -> OrderAuditLog:
    """Stage an audit row; committed together with the change it records."""
    entry = OrderAuditLog(
        order_id=order_id,
        action=action,
        from_value=from_value,
        to_value=to_value,
        actor=actor or get_actor(),
    )
    db.add(entry)
    return entry


def list_order_history(db: Session, order_id: str) -> list[OrderAuditLog]:
    return (
        db.query(OrderAuditLog)
        .filter(OrderAuditLog.order_id == order_id)
        .order_by(OrderAuditLog.id.asc())
        .all()
    )
