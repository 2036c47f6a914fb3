"""Dashboard figures derived from a full order snapshot.

Everything is recomputed from scratch on each call; nothing is cached or
accumulated between calls. Calendar-day and hour-of-day bucketing use the
server's local time.
"""

from __future__ import annotations

from collections import Counter
from datetime import date, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable, Mapping, Optional

from bistro.core.clock import MS_PER_MINUTE, ms_to_local
from bistro.core.money import from_cents

TOP_ITEMS_LIMIT = 5
HISTORY_DAYS = 7
UNCATEGORIZED = "Other"


def _day_of(order: Mapping[str, Any]) -> date:
    return ms_to_local(order["timestamp"]).date()


def _is_completed(order: Mapping[str, Any]) -> bool:
    return order.get("status") == "completed"


def _top_items(orders: list[Mapping[str, Any]]) -> list[dict[str, Any]]:
    # Ties keep first-seen order
    tally: dict[Any, dict[str, Any]] = {}
    for order in orders:
        for line in order.get("items") or []:
            key = line.get("menu_item_id")
            if key is None:
                key = f"name:{line.get('name')}"
            entry = tally.setdefault(key, {"menu_item_id": line.get("menu_item_id"), "name": line.get("name"), "count": 0})
            entry["count"] += int(line.get("quantity") or 0)
    return sorted(tally.values(), key=lambda entry: entry["count"], reverse=True)[:TOP_ITEMS_LIMIT]


def _category_mix(orders: list[Mapping[str, Any]]) -> list[dict[str, Any]]:
    mix: Counter[str] = Counter()
    for order in orders:
        for line in order.get("items") or []:
            mix[line.get("category") or UNCATEGORIZED] += int(line.get("quantity") or 0)
    return [{"category": label, "quantity": quantity} for label, quantity in mix.most_common()]


def _hourly(orders: list[Mapping[str, Any]]) -> list[dict[str, Any]]:
    buckets = [0] * 24
    for order in orders:
        buckets[ms_to_local(order["timestamp"]).hour] += 1
    return [{"hour": f"{hour:02d}:00", "orders": count} for hour, count in enumerate(buckets)]


def _average_wait_minutes(orders: list[Mapping[str, Any]]) -> int:
    waits = [order["completed_at"] - order["timestamp"] for order in orders if order.get("completed_at")]
    if not waits:
        return 0
    mean = Decimal(sum(waits)) / len(waits) / MS_PER_MINUTE
    return int(mean.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def compute_analytics(orders: Iterable[Mapping[str, Any]], now: Optional[datetime] = None) -> dict[str, Any]:
    orders = list(orders)
    today = (now or datetime.now()).date()

    revenue_by_day: Counter[date] = Counter()
    total_cents = 0
    for order in orders:
        if not _is_completed(order):
            continue
        cents = int(order.get("total_cents") or 0)
        total_cents += cents
        revenue_by_day[_day_of(order)] += cents

    history = []
    for offset in range(HISTORY_DAYS - 1, -1, -1):
        day = today - timedelta(days=offset)
        history.append({"date": day.isoformat(), "revenue": from_cents(revenue_by_day.get(day, 0))})

    return {
        "order_count": len(orders),
        "daily_revenue": from_cents(revenue_by_day.get(today, 0)),
        "total_revenue": from_cents(total_cents),
        "revenue_history": history,
        "top_items": _top_items(orders),
        "category_mix": _category_mix(orders),
        "hourly_data": _hourly(orders),
        "average_wait_minutes": _average_wait_minutes(orders),
    }
