from __future__ import annotations

from bistro.core.metrics import service_metrics
from bistro.realtime.feeds import categories_feed, menu_feed, orders_feed, settings_feed, staff_feed, tables_feed
from bistro.services.event_bus import event_bus
from bistro.services.store_events import MENU_UPDATED, SETTINGS_UPDATED, STAFF_UPDATED, TABLES_UPDATED


def handle_order_changed(_payload: dict) -> None:
    orders_feed.publish()


def handle_order_status_changed(payload: dict) -> None:
    service_metrics.count_transition(payload.get("previous_status") or "", payload["status"])
    orders_feed.publish()


def handle_menu_updated(payload: dict) -> None:
    menu_feed.publish()
    if str(payload.get("action", "")).startswith("category."):
        categories_feed.publish()


def handle_tables_updated(_payload: dict) -> None:
    tables_feed.publish()


def handle_settings_updated(_payload: dict) -> None:
    settings_feed.publish()


def handle_staff_updated(_payload: dict) -> None:
    staff_feed.publish()


event_bus.subscribe("order.created", handle_order_changed)
event_bus.subscribe("order.status.changed", handle_order_status_changed)
event_bus.subscribe("order.priority.changed", handle_order_changed)
event_bus.subscribe(MENU_UPDATED, handle_menu_updated)
event_bus.subscribe(TABLES_UPDATED, handle_tables_updated)
event_bus.subscribe(SETTINGS_UPDATED, handle_settings_updated)
event_bus.subscribe(STAFF_UPDATED, handle_staff_updated)
