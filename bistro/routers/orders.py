from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query, Response
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from bistro.core.database import get_db
from bistro.deps import current_actor
from bistro.core.money import to_cents
from bistro.errors import NotFoundError
from bistro.payments.service import PaymentService, get_payment_service
from bistro.services.checkout import place_order
from bistro.services.order_audit import list_order_history
from bistro.services.orders import (
    OrderLine,
    advance_order,
    filter_orders,
    find_by_payment_ref,
    get_order,
    list_orders,
    normalize_status,
    order_to_dict,
    set_priority,
)

router = APIRouter(prefix="/api/orders", tags=["orders"])


class OrderLineIn(BaseModel):
    menu_item_id: Optional[int] = None
    name: str
    price: float = Field(..., ge=0)
    quantity: int = Field(..., ge=1)
    category: Optional[str] = None
    notes: Optional[str] = None


class OrderCreate(BaseModel):
    table_number: str
    items: List[OrderLineIn]
    payment_ref: Optional[str] = None


class StatusUpdate(BaseModel):
    status: str


class PriorityUpdate(BaseModel):
    priority: bool


def parse_status_filter(values: Optional[List[str]]) -> List[str]:
    """Accepts repeated ?status= params and comma-separated lists."""
    statuses: List[str] = []
    for raw in values or []:
        for part in raw.split(","):
            if part.strip():
                statuses.append(normalize_status(part))
    return statuses


@router.post("", status_code=201)
def create_order(
    payload: OrderCreate,
    response: Response,
    db: Session = Depends(get_db),
    payments: PaymentService = Depends(get_payment_service),
) -> Dict[str, Any]:
    """Direct submission. Same store gate and payment rule as cart checkout; menu lines are repriced."""
    lines = [
        OrderLine(
            menu_item_id=item.menu_item_id,
            name=item.name,
            price_cents=to_cents(item.price),
            quantity=item.quantity,
            category=item.category,
            notes=item.notes,
        )
        for item in payload.items
    ]
    order, created = place_order(
        db,
        table_number=payload.table_number,
        lines=lines,
        payments=payments,
        payment_ref=payload.payment_ref,
    )
    if not created:
        response.status_code = 200
    return {**order_to_dict(order), "created": created}


@router.get("")
def list_all_orders(
    status: Optional[List[str]] = Query(None),
    search: Optional[str] = None,
    db: Session = Depends(get_db),
):
    statuses = parse_status_filter(status)
    orders = [order_to_dict(order) for order in list_orders(db)]
    return filter_orders(orders, statuses, search)


@router.get("/by-payment/{payment_ref}")
def get_order_by_payment(payment_ref: str, db: Session = Depends(get_db)):
    order = find_by_payment_ref(db, payment_ref)
    if not order:
        raise NotFoundError("No order recorded for this payment")
    return order_to_dict(order)


@router.get("/{order_id}")
def get_single_order(order_id: str, db: Session = Depends(get_db)):
    return order_to_dict(get_order(db, order_id))


@router.get("/{order_id}/history")
def get_order_history(order_id: str, db: Session = Depends(get_db)):
    get_order(db, order_id)
    return [
        {
            "action": entry.action,
            "from": entry.from_value,
            "to": entry.to_value,
            "actor": entry.actor,
            "created_at": entry.created_at.isoformat() if entry.created_at else None,
        }
        for entry in list_order_history(db, order_id)
    ]


@router.post("/{order_id}/status")
def update_order_status(
    order_id: str,
    body: StatusUpdate,
    actor: Optional[str] = Depends(current_actor),
    db: Session = Depends(get_db),
):
    order = advance_order(db, order_id, body.status, actor=actor)
    return order_to_dict(order)


@router.post("/{order_id}/priority")
def update_order_priority(
    order_id: str,
    body: PriorityUpdate,
    actor: Optional[str] = Depends(current_actor),
    db: Session = Depends(get_db),
):
    order = set_priority(db, order_id, body.priority, actor=actor)
    return order_to_dict(order)
