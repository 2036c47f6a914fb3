from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from bistro.core.database import get_db
from bistro.services.staff import (
    create_staff_member,
    delete_staff_member,
    list_staff,
    staff_to_dict,
    update_staff_member,
)

router = APIRouter(prefix="/api/staff", tags=["staff"])


class StaffCreate(BaseModel):
    name: str
    role: str = "waiter"
    status: str = "active"
    phone: Optional[str] = None
    avatar_url: Optional[str] = None


class StaffUpdate(BaseModel):
    name: Optional[str] = None
    role: Optional[str] = None
    status: Optional[str] = None
    phone: Optional[str] = None
    avatar_url: Optional[str] = None
    orders_handled: Optional[int] = Field(default=None, ge=0)


@router.get("")
def get_staff(db: Session = Depends(get_db)):
    return [staff_to_dict(member) for member in list_staff(db)]


@router.post("", status_code=201)
def add_staff_member(payload: StaffCreate, db: Session = Depends(get_db)):
    return staff_to_dict(create_staff_member(db, payload.model_dump()))


@router.patch("/{staff_id}")
def edit_staff_member(staff_id: int, payload: StaffUpdate, db: Session = Depends(get_db)):
    return staff_to_dict(update_staff_member(db, staff_id, payload.model_dump(exclude_unset=True)))


@router.delete("/{staff_id}", status_code=204)
def remove_staff_member(staff_id: int, db: Session = Depends(get_db)):
    delete_staff_member(db, staff_id)
