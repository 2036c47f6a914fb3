from __future__ import annotations

from bistro.models.order import Order
from bistro.services.event_bus import event_bus


def build_order_payload(order: Order, previous_status: str | None = None) -> dict:
    return {
        "order_id": order.id,
        "table_number": order.table_number,
        "status": order.status,
        "previous_status": previous_status,
        "total_cents": int(order.total_cents or 0),
        "priority": bool(order.priority),
        "payment_ref": order.payment_ref,
    }


def emit_order_created(order: Order) -> None:
    event_bus.emit("order.created", build_order_payload(order))


def emit_order_status_changed(order: Order, previous_status: str | None) -> None:
    if previous_status == order.status:
        return
    event_bus.emit("order.status.changed", build_order_payload(order, previous_status=previous_status))


def emit_order_priority_changed(order: Order) -> None:
    event_bus.emit("order.priority.changed", build_order_payload(order))
