import pytest
from starlette.websockets import WebSocketDisconnect

from tests.fixtures_data import SCENARIO_A_ORDER


def test_orders_socket_streams_filtered_snapshots(client):
    with client.websocket_connect("/ws/orders?status=pending") as websocket:
        initial = websocket.receive_json()
        order = client.post("/api/orders", json=SCENARIO_A_ORDER).json()
        pushed = websocket.receive_json()
        client.post(f"/api/orders/{order['id']}/status", json={"status": "completed"})
        cleared = websocket.receive_json()

    assert initial == {"feed": "orders", "initial": True, "items": []}
    assert pushed["initial"] is False
    assert [item["id"] for item in pushed["items"]] == [order["id"]]
    assert cleared["items"] == []


def test_collection_socket_sends_current_tables(client):
    client.post("/api/tables", json={"number": "3"})

    with client.websocket_connect("/ws/tables") as websocket:
        snapshot = websocket.receive_json()

    assert snapshot["feed"] == "tables"
    assert [table["number"] for table in snapshot["items"]] == ["3"]


def test_settings_socket_pushes_store_closing(client):
    with client.websocket_connect("/ws/settings") as websocket:
        assert websocket.receive_json()["items"][0]["is_open"] is True
        client.patch("/api/settings", json={"is_open": False})
        assert websocket.receive_json()["items"][0]["is_open"] is False


def test_unknown_feed_is_refused(client):
    with pytest.raises(WebSocketDisconnect) as exc:
        with client.websocket_connect("/ws/reservations") as websocket:
            websocket.receive_json()

    assert exc.value.code == 1008


def test_bad_status_filter_is_refused(client):
    with pytest.raises(WebSocketDisconnect) as exc:
        with client.websocket_connect("/ws/orders?status=cooking") as websocket:
            websocket.receive_json()

    assert exc.value.code == 1008
