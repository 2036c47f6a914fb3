from types import SimpleNamespace

import pytest

from bistro.realtime.feed import LiveFeed
from bistro.realtime.feeds import orders_feed
from bistro.services.orders import OrderLine, advance_order, submit_order


def _session_factory():
    return SimpleNamespace(close=lambda: None)


class Collection:
    def __init__(self, *items):
        self.items = list(items)
        self.broken = False

    def load(self, _db):
        if self.broken:
            raise RuntimeError("ledger offline")
        return [dict(item) for item in self.items]


@pytest.fixture
def collection():
    return Collection({"id": 1, "status": "pending"}, {"id": 2, "status": "completed"})


@pytest.fixture
def feed(collection):
    return LiveFeed("dishes", collection.load, _session_factory)


def test_subscribe_delivers_initial_snapshot(feed):
    received = []

    subscription = feed.subscribe(received.append)

    assert subscription.loading is False
    assert len(received) == 1
    assert received[0].initial is True
    assert [item["id"] for item in received[0].items] == [1, 2]
    assert received[0].as_message()["feed"] == "dishes"
    subscription.cancel()


def test_publish_pushes_full_collection_not_diffs(feed, collection):
    received = []
    subscription = feed.subscribe(received.append)

    collection.items.append({"id": 3, "status": "pending"})
    delivered = feed.publish()

    assert delivered == 1
    assert received[-1].initial is False
    assert [item["id"] for item in received[-1].items] == [1, 2, 3]
    subscription.cancel()


def test_predicate_filters_each_snapshot(feed, collection):
    received = []
    subscription = feed.subscribe(received.append, predicate=lambda item: item["status"] == "pending")

    collection.items[1]["status"] = "pending"
    feed.publish()

    assert [item["id"] for item in received[0].items] == [1]
    assert [item["id"] for item in received[1].items] == [1, 2]
    subscription.cancel()


def test_cancel_stops_delivery_and_is_idempotent(feed):
    received = []
    subscription = feed.subscribe(received.append)

    assert subscription.cancel() is True
    assert subscription.cancel() is False
    assert feed.subscriber_count == 0
    assert feed.publish() == 0
    assert len(received) == 1


def test_stale_versions_are_dropped(feed):
    received = []
    subscription = feed.subscribe(received.append)

    assert subscription.deliver([{"id": 9}], version=1) is False
    assert len(received) == 1
    subscription.cancel()


def test_failed_initial_load_clears_loading_and_reports(feed, collection):
    collection.broken = True
    received, errors = [], []

    subscription = feed.subscribe(received.append, on_error=errors.append)

    assert subscription.loading is False
    assert received == []
    assert isinstance(errors[0], RuntimeError)

    collection.broken = False
    feed.publish()
    assert received[0].initial is True
    subscription.cancel()


def test_failing_subscriber_does_not_block_others(feed):
    received = []

    def explode(_snapshot):
        raise ValueError("renderer crashed")

    broken = feed.subscribe(explode)
    healthy = feed.subscribe(received.append)

    assert feed.publish() == 1
    assert len(received) == 2
    broken.cancel()
    healthy.cancel()


def test_subscriber_may_cancel_from_its_callback(feed):
    seen = []

    def cancel_after_first_push(snapshot):
        seen.append(snapshot)
        if not snapshot.initial:
            subscription.cancel()

    subscription = feed.subscribe(cancel_after_first_push)
    feed.publish()
    feed.publish()

    assert subscription.cancelled is True
    assert feed.subscriber_count == 0
    assert len(seen) == 2


def test_orders_feed_follows_ledger_changes(db):
    snapshots = []
    subscription = orders_feed.subscribe(
        snapshots.append, predicate=lambda order: order["status"] == "pending"
    )
    try:
        order, _ = submit_order(
            db,
            table_number="12",
            lines=[OrderLine(menu_item_id=None, name="Bruschetta", price_cents=650, quantity=1)],
        )
        advance_order(db, order.id, "completed")
    finally:
        subscription.cancel()

    assert [len(snapshot.items) for snapshot in snapshots] == [0, 1, 0]
    assert snapshots[1].items[0]["id"] == order.id
