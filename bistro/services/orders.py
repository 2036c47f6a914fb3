from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Any, Iterable, Optional, Sequence

from sqlalchemy import desc
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from bistro.core.clock import now_ms
from bistro.core.money import from_cents
from bistro.errors import LedgerUnavailableError, NotFoundError, OrderTransitionError, ValidationError
from bistro.models.order import Order
from bistro.models.order_item import OrderItem
from bistro.services.order_audit import log_order_action
from bistro.services.order_events import (
    emit_order_created,
    emit_order_priority_changed,
    emit_order_status_changed,
)

logger = logging.getLogger(__name__)

PENDING = "pending"
IN_PROGRESS = "in-progress"
COMPLETED = "completed"

ORDER_STATUSES = (PENDING, IN_PROGRESS, COMPLETED)
ACTIVE_STATUSES = (PENDING, IN_PROGRESS)

# Forward-only. Reaching in-progress is only offered through the kitchen "start" route.
ALLOWED_TRANSITIONS: dict[str, frozenset[str]] = {
    PENDING: frozenset({IN_PROGRESS, COMPLETED}),
    IN_PROGRESS: frozenset({COMPLETED}),
    COMPLETED: frozenset(),
}


@dataclass
class OrderLine:
    menu_item_id: Optional[int]
    name: str
    price_cents: int
    quantity: int
    category: Optional[str] = None
    notes: Optional[str] = None

    @property
    def subtotal_cents(self) -> int:
        return self.price_cents * self.quantity


def new_order_id() -> str:
    return uuid.uuid4().hex


def normalize_status(value: str | None) -> str:
    status = (value or "").strip().lower().replace("_", "-")
    if status not in ORDER_STATUSES:
        raise ValidationError(f"Unknown order status: {value!r}")
    return status


def _validate_lines(lines: Sequence[OrderLine]) -> None:
    if not lines:
        raise ValidationError("Cart is empty")
    for line in lines:
        if not (line.name or "").strip():
            raise ValidationError("Every item needs a name")
        if int(line.quantity) <= 0:
            raise ValidationError(f"Quantity for {line.name} must be at least 1")
        if int(line.price_cents) < 0:
            raise ValidationError(f"Price for {line.name} cannot be negative")


def get_order(db: Session, order_id: str) -> Order:
    order = db.query(Order).filter(Order.id == order_id).first()
    if not order:
        raise NotFoundError("Order not found")
    return order


def find_by_payment_ref(db: Session, payment_ref: str | None) -> Order | None:
    ref = (payment_ref or "").strip()
    if not ref:
        return None
    return db.query(Order).filter(Order.payment_ref == ref).first()


def submit_order(
    db: Session,
    *,
    table_number: str,
    lines: Sequence[OrderLine],
    payment_ref: str | None = None,
    cart_id: str | None = None,
) -> tuple[Order, bool]:
    """Insert a pending order. Returns (order, created).

    With a payment reference the write is idempotent: an order already
    recorded for that reference is returned untouched with created=False.
    """
    table = (table_number or "").strip()
    if not table:
        raise ValidationError("Please enter your table number")
    _validate_lines(lines)

    ref = (payment_ref or "").strip() or None
    if ref:
        existing = find_by_payment_ref(db, ref)
        if existing:
            logger.info("order already recorded for payment", extra={"order_id": existing.id})
            return existing, False

    order = Order(
        id=new_order_id(),
        table_number=table,
        status=PENDING,
        total_cents=sum(line.subtotal_cents for line in lines),
        priority=False,
        timestamp=now_ms(),
        payment_ref=ref,
        cart_id=cart_id,
    )
    order.items = [
        OrderItem(
            position=position,
            menu_item_id=line.menu_item_id,
            name=line.name.strip(),
            price_cents=int(line.price_cents),
            quantity=int(line.quantity),
            category=line.category,
            notes=(line.notes or None),
        )
        for position, line in enumerate(lines)
    ]

    try:
        db.add(order)
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        # Concurrent checkout with the same payment won the insert
        existing = find_by_payment_ref(db, ref) if ref else None
        if existing:
            return existing, False
        logger.exception("order insert rejected")
        raise LedgerUnavailableError(ref) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("order insert failed")
        raise LedgerUnavailableError(ref) from exc

    db.refresh(order)
    logger.info("order created", extra={"order_id": order.id})
    emit_order_created(order)
    return order, True


def _commit_change(db: Session, order: Order) -> None:
    # No version column: concurrent field updates are last-write-wins.
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("order update failed", extra={"order_id": order.id})
        raise LedgerUnavailableError() from exc
    db.refresh(order)


def advance_order(db: Session, order_id: str, new_status: str, actor: str | None = None) -> Order:
    target = normalize_status(new_status)
    order = get_order(db, order_id)
    previous = order.status

    if previous == target:
        return order
    if target not in ALLOWED_TRANSITIONS.get(previous, frozenset()):
        raise OrderTransitionError(f"Cannot move order from {previous} to {target}")

    order.status = target
    if target == COMPLETED:
        order.completed_at = now_ms()
    log_order_action(db, order_id=order.id, action="status", from_value=previous, to_value=target, actor=actor)
    _commit_change(db, order)

    logger.info("order %s -> %s", previous, target, extra={"order_id": order.id})
    emit_order_status_changed(order, previous)
    return order


def set_priority(db: Session, order_id: str, flag: bool, actor: str | None = None) -> Order:
    order = get_order(db, order_id)
    if order.status == COMPLETED:
        raise OrderTransitionError("Completed orders cannot change priority")
    if bool(order.priority) == bool(flag):
        return order

    previous = "true" if order.priority else "false"
    order.priority = bool(flag)
    log_order_action(
        db,
        order_id=order.id,
        action="priority",
        from_value=previous,
        to_value="true" if flag else "false",
        actor=actor,
    )
    _commit_change(db, order)
    emit_order_priority_changed(order)
    return order


def list_orders(db: Session) -> list[Order]:
    """Every order, newest first."""
    return db.query(Order).order_by(desc(Order.timestamp), desc(Order.id)).all()


def list_orders_for_table(db: Session, table_number: str) -> list[Order]:
    return (
        db.query(Order)
        .filter(Order.table_number == table_number)
        .order_by(desc(Order.timestamp), desc(Order.id))
        .all()
    )


def order_matches(
    order: dict[str, Any],
    statuses: Iterable[str] | None = None,
    search: str | None = None,
) -> bool:
    wanted = set(statuses or ())
    if wanted and order["status"] not in wanted:
        return False
    needle = (search or "").strip().lower()
    if needle:
        return needle in str(order["table_number"]).lower() or needle in str(order["id"]).lower()
    return True


def filter_orders(
    orders: Iterable[dict[str, Any]],
    statuses: Iterable[str] | None = None,
    search: str | None = None,
) -> list[dict[str, Any]]:
    statuses = list(statuses or ())
    return [order for order in orders if order_matches(order, statuses, search)]


def order_item_to_dict(item: OrderItem) -> dict[str, Any]:
    return {
        "menu_item_id": item.menu_item_id,
        "name": item.name,
        "price": from_cents(item.price_cents),
        "price_cents": item.price_cents,
        "quantity": item.quantity,
        "category": item.category,
        "notes": item.notes,
    }


def order_to_dict(order: Order) -> dict[str, Any]:
    return {
        "id": order.id,
        "table_number": order.table_number,
        "items": [order_item_to_dict(item) for item in order.items],
        "status": order.status,
        "total_cents": order.total_cents,
        "total_price": from_cents(order.total_cents),
        "timestamp": order.timestamp,
        "completed_at": order.completed_at,
        "payment_ref": order.payment_ref,
        "cart_id": order.cart_id,
        "priority": bool(order.priority),
    }
