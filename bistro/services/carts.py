from __future__ import annotations

import json
import logging
import uuid
from typing import Any, Optional

from sqlalchemy.orm import Session

from bistro.core.money import from_cents
from bistro.errors import NotFoundError, StoreClosedError, ValidationError
from bistro.models.cart import Cart
from bistro.models.menu_item import MenuItem
from bistro.models.order import Order
from bistro.payments.service import PaymentService
from bistro.services.menu import get_item
from bistro.services.checkout import place_order
from bistro.services.orders import OrderLine, find_by_payment_ref
from bistro.services.settings import is_store_open

logger = logging.getLogger(__name__)


def add_line(lines: list[dict], item: MenuItem, *, is_open: bool) -> tuple[list[dict], bool]:
    """Returns (lines, accepted). A closed store or a sold-out item leaves the cart as it was."""
    if not is_open or item.sold_out:
        return lines, False

    updated = [dict(line) for line in lines]
    for line in updated:
        if line["menu_item_id"] == item.id:
            line["quantity"] += 1
            return updated, True

    updated.append(
        {
            "menu_item_id": item.id,
            "name": item.name,
            "price_cents": item.price_cents,
            "category": item.category.name if item.category else None,
            "quantity": 1,
            "notes": None,
        }
    )
    return updated, True


def change_quantity(lines: list[dict], menu_item_id: int, delta: int) -> list[dict]:
    updated = []
    for line in lines:
        line = dict(line)
        if line["menu_item_id"] == menu_item_id:
            line["quantity"] += delta
        if line["quantity"] > 0:
            updated.append(line)
    return updated


def read_lines(cart: Cart) -> list[dict]:
    try:
        data = json.loads(cart.lines_json or "[]")
    except json.JSONDecodeError:
        logger.warning("discarding unreadable cart %s", cart.id)
        return []
    return data if isinstance(data, list) else []


def _save(db: Session, cart: Cart, lines: list[dict] | None = None) -> Cart:
    if lines is not None:
        cart.lines_json = json.dumps(lines, ensure_ascii=False)
    db.commit()
    db.refresh(cart)
    return cart


def create_cart(db: Session, table_number: str = "") -> Cart:
    cart = Cart(id=uuid.uuid4().hex, table_number=(table_number or "").strip(), lines_json="[]")
    db.add(cart)
    return _save(db, cart)


def get_cart(db: Session, cart_id: str) -> Cart:
    cart = db.query(Cart).filter(Cart.id == cart_id).first()
    if not cart:
        raise NotFoundError("Cart not found")
    return cart


def add_item(db: Session, cart_id: str, menu_item_id: int) -> tuple[Cart, bool]:
    cart = get_cart(db, cart_id)
    item = get_item(db, menu_item_id)
    lines, accepted = add_line(read_lines(cart), item, is_open=is_store_open(db))
    if not accepted:
        return cart, False
    return _save(db, cart, lines), True


def update_quantity(db: Session, cart_id: str, menu_item_id: int, delta: int) -> Cart:
    cart = get_cart(db, cart_id)
    return _save(db, cart, change_quantity(read_lines(cart), menu_item_id, delta))


def set_line_notes(db: Session, cart_id: str, menu_item_id: int, notes: Optional[str]) -> Cart:
    cart = get_cart(db, cart_id)
    lines = read_lines(cart)
    for line in lines:
        if line["menu_item_id"] == menu_item_id:
            line["notes"] = (notes or "").strip() or None
    return _save(db, cart, lines)


def set_table(db: Session, cart_id: str, table_number: str) -> Cart:
    cart = get_cart(db, cart_id)
    cart.table_number = (table_number or "").strip()
    return _save(db, cart)


def clear_cart(db: Session, cart: Cart) -> Cart:
    return _save(db, cart, [])


def checkout(
    db: Session,
    cart_id: str,
    *,
    payments: PaymentService,
    payment_ref: Optional[str] = None,
) -> tuple[Order, bool]:
    """Turn the cart into a pending order. Returns (order, created)."""
    cart = get_cart(db, cart_id)
    ref = (payment_ref or "").strip() or None

    # A retried checkout for an already recorded payment
    existing = find_by_payment_ref(db, ref)
    if existing:
        if existing.cart_id == cart.id:
            clear_cart(db, cart)
        return existing, False

    if not is_store_open(db):
        raise StoreClosedError()

    lines = read_lines(cart)
    if not lines:
        raise ValidationError("Cart is empty")
    if not cart.table_number:
        raise ValidationError("Please enter your table number")

    order, created = place_order(
        db,
        table_number=cart.table_number,
        lines=[
            OrderLine(
                menu_item_id=line["menu_item_id"],
                name=line["name"],
                price_cents=line["price_cents"],
                quantity=line["quantity"],
                category=line.get("category"),
                notes=line.get("notes"),
            )
            for line in lines
        ],
        payments=payments,
        payment_ref=ref,
        cart_id=cart.id,
    )
    if order.cart_id == cart.id:
        clear_cart(db, cart)
    return order, created


def cart_to_dict(cart: Cart) -> dict[str, Any]:
    lines = read_lines(cart)
    total_cents = sum(line["price_cents"] * line["quantity"] for line in lines)
    return {
        "id": cart.id,
        "table_number": cart.table_number,
        "items": [{**line, "price": from_cents(line["price_cents"])} for line in lines],
        "item_count": sum(line["quantity"] for line in lines),
        "total_cents": total_cents,
        "total_price": from_cents(total_cents),
    }
