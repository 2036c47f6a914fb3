from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional, Sequence

from sqlalchemy.orm import Session

from bistro.core import config
from bistro.errors import StoreClosedError, ValidationError
from bistro.models.menu_item import MenuItem
from bistro.models.order import Order
from bistro.payments.service import PaymentService
from bistro.services.orders import OrderLine, find_by_payment_ref, submit_order
from bistro.services.settings import is_store_open

logger = logging.getLogger(__name__)


def price_lines(db: Session, lines: Sequence[OrderLine]) -> list[OrderLine]:
    """Menu-backed lines take the current menu name, price and category."""
    ids = {line.menu_item_id for line in lines if line.menu_item_id is not None}
    menu = {item.id: item for item in db.query(MenuItem).filter(MenuItem.id.in_(ids)).all()} if ids else {}

    priced = []
    for line in lines:
        item = menu.get(line.menu_item_id)
        if item is None:
            priced.append(line)
            continue
        if item.sold_out:
            raise ValidationError(f"{item.name} is sold out")
        priced.append(
            replace(
                line,
                name=item.name,
                price_cents=item.price_cents,
                category=item.category.name if item.category else line.category,
            )
        )
    return priced


def verify_payment(payments: PaymentService, payment_ref: Optional[str], total_cents: int) -> None:
    if not payment_ref:
        raise ValidationError("Payment is required before placing an order")
    intent = payments.retrieve_intent(payment_ref)
    if not intent.succeeded:
        raise ValidationError("Payment has not been completed")
    if intent.amount != total_cents:
        logger.warning("payment amount %s does not match order total %s", intent.amount, total_cents)
        raise ValidationError("Payment amount does not match the order total")


def place_order(
    db: Session,
    *,
    table_number: str,
    lines: Sequence[OrderLine],
    payments: PaymentService,
    payment_ref: Optional[str] = None,
    cart_id: Optional[str] = None,
) -> tuple[Order, bool]:
    """Customer submission: store gate, payment check, then the ledger insert.

    An order already recorded for the payment is returned with created=False,
    even if the store has closed since.
    """
    ref = (payment_ref or "").strip() or None
    existing = find_by_payment_ref(db, ref)
    if existing:
        return existing, False

    if not is_store_open(db):
        raise StoreClosedError()

    lines = price_lines(db, lines)
    if config.REQUIRE_PAYMENT:
        verify_payment(payments, ref, sum(line.subtotal_cents for line in lines))

    return submit_order(db, table_number=table_number, lines=lines, payment_ref=ref, cart_id=cart_id)
