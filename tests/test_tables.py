from unittest.mock import patch

import pytest

from bistro.core.clock import MS_PER_HOUR
from bistro.errors import ValidationError
from bistro.services.orders import OrderLine, advance_order, submit_order
from bistro.services.tables import MoveThrottle, clamp_percent, create_table, get_table, move_table, table_orders


def test_new_table_defaults(client):
    response = client.post("/api/tables", json={"number": "5"})

    assert response.status_code == 201
    body = response.json()
    assert (body["x"], body["y"]) == (50.0, 50.0)
    assert body["seats"] == 2
    assert body["status"] == "available"
    assert body["reservation_time"] == ""


def test_tables_are_listed_by_number(client):
    for number in ("B", "A", "C"):
        client.post("/api/tables", json={"number": number})

    numbers = [table["number"] for table in client.get("/api/tables").json()]

    assert numbers == ["A", "B", "C"]


@pytest.mark.parametrize(
    "raw, expected",
    [(-20, 0.0), (140, 100.0), (33.3, 33.3), ("12.5", 12.5), (float("inf"), 100.0)],
)
def test_clamp_percent(raw, expected):
    assert clamp_percent(raw) == expected


def test_clamp_rejects_non_numbers():
    with pytest.raises(ValidationError):
        clamp_percent("left")
    with pytest.raises(ValidationError):
        clamp_percent(float("nan"))


def test_drag_is_clamped_and_persisted_on_drop(client):
    table_id = client.post("/api/tables", json={"number": "1"}).json()["id"]

    response = client.post(f"/api/tables/{table_id}/move", json={"x": -15, "y": 180, "final": True})

    assert response.json()["persisted"] is True
    assert (response.json()["x"], response.json()["y"]) == (0.0, 100.0)
    stored = client.get("/api/tables").json()[0]
    assert (stored["x"], stored["y"]) == (0.0, 100.0)


def test_drag_frames_are_throttled_but_final_frame_is_written(db):
    table = create_table(db, "9")
    throttle = MoveThrottle(min_interval_ms=60_000)

    first = move_table(db, table.id, 10, 10, throttle=throttle)
    skipped = move_table(db, table.id, 20, 120, throttle=throttle)

    assert first.persisted is True
    assert skipped.persisted is False
    assert (skipped.x, skipped.y) == (20.0, 100.0)
    db.expire_all()
    assert (get_table(db, table.id).x, get_table(db, table.id).y) == (10.0, 10.0)

    dropped = move_table(db, table.id, 30, 40, final=True, throttle=throttle)

    assert dropped.persisted is True
    db.expire_all()
    assert (get_table(db, table.id).x, get_table(db, table.id).y) == (30.0, 40.0)


def test_reservation_time_only_kept_when_reserved(client):
    table_id = client.post("/api/tables", json={"number": "2"}).json()["id"]

    reserved = client.post(f"/api/tables/{table_id}/status", json={"status": "reserved", "reservation_time": "19:30"})
    occupied = client.post(f"/api/tables/{table_id}/status", json={"status": "occupied", "reservation_time": "19:30"})
    invalid = client.post(f"/api/tables/{table_id}/status", json={"status": "broken"})

    assert reserved.json()["reservation_time"] == "19:30"
    assert occupied.json()["status"] == "occupied"
    assert occupied.json()["reservation_time"] == ""
    assert invalid.status_code == 400


def test_table_orders_split_ongoing_and_recent(db):
    table = create_table(db, "5")
    now = 10 * MS_PER_HOUR
    line = [OrderLine(menu_item_id=1, name="Soup", price_cents=500, quantity=1)]

    with patch("bistro.services.orders.now_ms", return_value=now - 2 * MS_PER_HOUR):
        old, _ = submit_order(db, table_number="5", lines=line)
        advance_order(db, old.id, "completed")
    with patch("bistro.services.orders.now_ms", return_value=now - 5 * 60_000):
        pending, _ = submit_order(db, table_number="5", lines=line)
        recent, _ = submit_order(db, table_number="5", lines=line)
        advance_order(db, recent.id, "completed")
        submit_order(db, table_number="6", lines=line)

    view = table_orders(db, table, now=now)

    assert [order["id"] for order in view["ongoing"]] == [pending.id]
    assert [order["id"] for order in view["recent"]] == [recent.id]


def test_table_orders_endpoint(client):
    table_id = client.post("/api/tables", json={"number": "8"}).json()["id"]
    client.post("/api/orders", json={"table_number": "8", "items": [{"name": "Tea", "price": 2, "quantity": 1}]})

    body = client.get(f"/api/tables/{table_id}/orders").json()

    assert body["table"]["number"] == "8"
    assert len(body["ongoing"]) == 1
    assert body["recent"] == []
