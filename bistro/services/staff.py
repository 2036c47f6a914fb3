from __future__ import annotations

from typing import Any, Mapping

from sqlalchemy import desc
from sqlalchemy.orm import Session

from bistro.core.clock import now_ms
from bistro.errors import NotFoundError, ValidationError
from bistro.models.staff import StaffMember
from bistro.services.store_events import emit_staff_updated

STAFF_ROLES = ("admin", "kitchen", "waiter")
STAFF_STATUSES = ("active", "on-break", "off-duty")

_EDITABLE = ("name", "role", "status", "phone", "avatar_url", "orders_handled")


def _check(data: Mapping[str, Any]) -> None:
    if "name" in data and not (data["name"] or "").strip():
        raise ValidationError("Name is required")
    if data.get("role") is not None and data["role"] not in STAFF_ROLES:
        raise ValidationError(f"Unknown role: {data['role']!r}")
    if data.get("status") is not None and data["status"] not in STAFF_STATUSES:
        raise ValidationError(f"Unknown staff status: {data['status']!r}")
    if data.get("orders_handled") is not None and int(data["orders_handled"]) < 0:
        raise ValidationError("orders_handled cannot be negative")


def list_staff(db: Session) -> list[StaffMember]:
    return db.query(StaffMember).order_by(desc(StaffMember.joined_at), desc(StaffMember.id)).all()


def get_staff_member(db: Session, staff_id: int) -> StaffMember:
    member = db.query(StaffMember).filter(StaffMember.id == staff_id).first()
    if not member:
        raise NotFoundError("Staff member not found")
    return member


def create_staff_member(db: Session, data: Mapping[str, Any]) -> StaffMember:
    data = dict(data, name=data.get("name"))
    _check(data)
    member = StaffMember(
        name=data["name"].strip(),
        role=data.get("role") or "waiter",
        status=data.get("status") or "active",
        joined_at=now_ms(),
        orders_handled=int(data.get("orders_handled") or 0),
        phone=data.get("phone"),
        avatar_url=data.get("avatar_url"),
    )
    db.add(member)
    db.commit()
    db.refresh(member)
    emit_staff_updated("create", member.id)
    return member


def update_staff_member(db: Session, staff_id: int, changes: Mapping[str, Any]) -> StaffMember:
    member = get_staff_member(db, staff_id)
    _check(changes)
    for key in _EDITABLE:
        if key in changes and changes[key] is not None:
            value = changes[key].strip() if key == "name" else changes[key]
            setattr(member, key, value)
    db.commit()
    db.refresh(member)
    emit_staff_updated("update", member.id)
    return member


def delete_staff_member(db: Session, staff_id: int) -> None:
    member = get_staff_member(db, staff_id)
    db.delete(member)
    db.commit()
    emit_staff_updated("delete", staff_id)


def staff_to_dict(member: StaffMember) -> dict[str, Any]:
    return {
        "id": member.id,
        "name": member.name,
        "role": member.role,
        "status": member.status,
        "joined_at": member.joined_at,
        "orders_handled": member.orders_handled,
        "phone": member.phone,
        "avatar_url": member.avatar_url,
    }
