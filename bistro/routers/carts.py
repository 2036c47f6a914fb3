from typing import Optional

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel
from sqlalchemy.orm import Session

from bistro.core.database import get_db
from bistro.payments.service import PaymentService, get_payment_service
from bistro.services import carts as cart_service
from bistro.services.orders import order_to_dict

router = APIRouter(prefix="/api/carts", tags=["carts"])


class CartCreate(BaseModel):
    table_number: str = ""


class CartItemIn(BaseModel):
    menu_item_id: int


class QuantityChange(BaseModel):
    delta: int


class NotesIn(BaseModel):
    notes: Optional[str] = None


class TableIn(BaseModel):
    table_number: str


class CheckoutIn(BaseModel):
    payment_ref: Optional[str] = None


@router.post("", status_code=201)
def open_cart(payload: Optional[CartCreate] = None, db: Session = Depends(get_db)):
    cart = cart_service.create_cart(db, payload.table_number if payload else "")
    return cart_service.cart_to_dict(cart)


@router.get("/{cart_id}")
def read_cart(cart_id: str, db: Session = Depends(get_db)):
    return cart_service.cart_to_dict(cart_service.get_cart(db, cart_id))


@router.post("/{cart_id}/items")
def add_to_cart(cart_id: str, payload: CartItemIn, db: Session = Depends(get_db)):
    cart, accepted = cart_service.add_item(db, cart_id, payload.menu_item_id)
    return {**cart_service.cart_to_dict(cart), "accepted": accepted}


@router.post("/{cart_id}/items/{menu_item_id}/quantity")
def change_quantity(cart_id: str, menu_item_id: int, payload: QuantityChange, db: Session = Depends(get_db)):
    return cart_service.cart_to_dict(cart_service.update_quantity(db, cart_id, menu_item_id, payload.delta))


@router.put("/{cart_id}/items/{menu_item_id}/notes")
def set_notes(cart_id: str, menu_item_id: int, payload: NotesIn, db: Session = Depends(get_db)):
    return cart_service.cart_to_dict(cart_service.set_line_notes(db, cart_id, menu_item_id, payload.notes))


@router.put("/{cart_id}/table")
def set_table(cart_id: str, payload: TableIn, db: Session = Depends(get_db)):
    return cart_service.cart_to_dict(cart_service.set_table(db, cart_id, payload.table_number))


@router.post("/{cart_id}/checkout", status_code=201)
def checkout(
    cart_id: str,
    response: Response,
    payload: Optional[CheckoutIn] = None,
    db: Session = Depends(get_db),
    payments: PaymentService = Depends(get_payment_service),
):
    order, created = cart_service.checkout(
        db,
        cart_id,
        payments=payments,
        payment_ref=payload.payment_ref if payload else None,
    )
    if not created:
        response.status_code = 200
    return {"order": order_to_dict(order), "created": created}
