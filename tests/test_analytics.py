from datetime import datetime

from bistro.services.analytics import compute_analytics

NOW = datetime(2026, 3, 14, 20, 0)


def _ms(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


def _order(order_id, moment, *, status="completed", total_cents=1000, items=(), wait_minutes=None):
    timestamp = _ms(moment)
    return {
        "id": order_id,
        "table_number": "1",
        "status": status,
        "total_cents": total_cents,
        "timestamp": timestamp,
        "completed_at": timestamp + wait_minutes * 60_000 if wait_minutes is not None else None,
        "items": list(items),
    }


def _line(menu_item_id, name, quantity, category=None):
    return {"menu_item_id": menu_item_id, "name": name, "quantity": quantity, "category": category}


def test_empty_snapshot_yields_zeroes():
    result = compute_analytics([], now=NOW)

    assert result["order_count"] == 0
    assert result["daily_revenue"] == 0
    assert result["total_revenue"] == 0
    assert result["top_items"] == []
    assert result["category_mix"] == []
    assert result["average_wait_minutes"] == 0
    assert len(result["hourly_data"]) == 24
    assert sum(bucket["orders"] for bucket in result["hourly_data"]) == 0


def test_revenue_counts_completed_orders_only():
    orders = [
        _order("a", datetime(2026, 3, 14, 12, 0), total_cents=2200),
        _order("b", datetime(2026, 3, 14, 13, 0), status="pending", total_cents=5000),
        _order("c", datetime(2026, 3, 12, 19, 0), total_cents=1250),
        _order("d", datetime(2026, 2, 1, 19, 0), total_cents=900),
    ]

    result = compute_analytics(orders, now=NOW)

    assert result["order_count"] == 4
    assert result["daily_revenue"] == 22.0
    assert result["total_revenue"] == 43.5
    history = result["revenue_history"]
    assert [day["date"] for day in history][0] == "2026-03-08"
    assert history[-1] == {"date": "2026-03-14", "revenue": 22.0}
    assert {"date": "2026-03-12", "revenue": 12.5} in history
    assert sum(day["revenue"] for day in history) == 34.5


def test_top_items_are_ranked_by_quantity_and_capped():
    items = [_line(i, f"Dish {i}", i) for i in range(1, 8)]
    orders = [
        _order("a", datetime(2026, 3, 14, 12, 0), items=items[:4]),
        _order("b", datetime(2026, 3, 14, 12, 30), items=items[3:] + [_line(1, "Dish 1", 9)]),
    ]

    top = compute_analytics(orders, now=NOW)["top_items"]

    assert len(top) == 5
    assert top[0] == {"menu_item_id": 1, "name": "Dish 1", "count": 10}
    assert top[1]["menu_item_id"] == 4
    assert top[1]["count"] == 8
    assert [entry["count"] for entry in top] == sorted((entry["count"] for entry in top), reverse=True)


def test_category_mix_groups_uncategorized_lines_as_other():
    orders = [
        _order(
            "a",
            datetime(2026, 3, 14, 12, 0),
            items=[_line(1, "Margherita", 2, "Pizza"), _line(2, "Water", 3), _line(3, "Diavola", 1, "Pizza")],
        )
    ]

    mix = compute_analytics(orders, now=NOW)["category_mix"]

    assert {"category": "Pizza", "quantity": 3} in mix
    assert {"category": "Other", "quantity": 3} in mix
    assert sum(entry["quantity"] for entry in mix) == 6


def test_hourly_buckets_use_local_hour():
    orders = [
        _order("a", datetime(2026, 3, 14, 9, 5)),
        _order("b", datetime(2026, 3, 14, 9, 55), status="pending"),
        _order("c", datetime(2026, 3, 13, 21, 15)),
    ]

    hourly = {bucket["hour"]: bucket["orders"] for bucket in compute_analytics(orders, now=NOW)["hourly_data"]}

    assert hourly["09:00"] == 2
    assert hourly["21:00"] == 1
    assert hourly["00:00"] == 0
    assert sum(hourly.values()) == 3


def test_average_wait_uses_completed_orders_with_timestamps():
    orders = [
        _order("a", datetime(2026, 3, 14, 12, 0), wait_minutes=10),
        _order("b", datetime(2026, 3, 14, 12, 0), wait_minutes=21),
        _order("c", datetime(2026, 3, 14, 12, 0), status="pending"),
    ]

    assert compute_analytics(orders, now=NOW)["average_wait_minutes"] == 16


def test_average_wait_rounds_half_minutes_up():
    orders = [
        _order("a", datetime(2026, 3, 14, 12, 0), wait_minutes=10),
        _order("b", datetime(2026, 3, 14, 12, 30), wait_minutes=11),
    ]

    assert compute_analytics(orders, now=NOW)["average_wait_minutes"] == 11


def test_analytics_endpoint_reads_stored_orders(client):
    from tests.fixtures_data import SCENARIO_A_ORDER

    order = client.post("/api/orders", json=SCENARIO_A_ORDER).json()
    client.post(f"/api/kitchen/orders/{order['id']}/complete")

    body = client.get("/api/analytics").json()

    assert body["order_count"] == 1
    assert body["total_revenue"] == 22.0
    assert body["daily_revenue"] == 22.0
    assert body["top_items"][0]["name"] == "Margherita"
