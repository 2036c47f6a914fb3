from __future__ import annotations

from collections import Counter
from typing import Any, Iterable, Mapping, Optional

from sqlalchemy.orm import Session

from bistro.core.clock import MS_PER_MINUTE, now_ms
from bistro.services.orders import ACTIVE_STATUSES, filter_orders, list_orders, order_to_dict

FRESH_UNDER_MINUTES = 10
WARNING_UNDER_MINUTES = 20


def wait_minutes(timestamp_ms: int, now: int) -> int:
    return max(0, (now - timestamp_ms) // MS_PER_MINUTE)


def urgency_for(minutes: int) -> str:
    if minutes < FRESH_UNDER_MINUTES:
        return "fresh"
    if minutes < WARNING_UNDER_MINUTES:
        return "warning"
    return "late"


def kitchen_queue(db: Session, *, prioritized: bool = False, now: Optional[int] = None) -> list[dict[str, Any]]:
    """Active tickets, newest first; priority tickets lead when prioritized."""
    now = now_ms() if now is None else now
    tickets = []
    for order in filter_orders((order_to_dict(o) for o in list_orders(db)), ACTIVE_STATUSES):
        minutes = wait_minutes(order["timestamp"], now)
        tickets.append({**order, "wait_minutes": minutes, "urgency": urgency_for(minutes)})
    if prioritized:
        tickets.sort(key=lambda ticket: not ticket["priority"])
    return tickets


def prep_summary(orders: Iterable[Mapping[str, Any]]) -> list[dict[str, Any]]:
    """Quantity to prepare per item name across the given tickets."""
    counts: Counter[str] = Counter()
    for order in orders:
        for line in order.get("items") or []:
            counts[line["name"]] += int(line.get("quantity") or 0)
    ranked = sorted(counts.items(), key=lambda pair: (-pair[1], pair[0]))
    return [{"name": name, "count": count} for name, count in ranked]
