from __future__ import annotations

from sqlalchemy.orm import Session

from bistro.core.database import SessionLocal
from bistro.errors import NotFoundError
from bistro.realtime.feed import LiveFeed, SessionFactory
from bistro.services.menu import category_to_dict, item_to_dict, list_categories, list_items
from bistro.services.orders import list_orders, order_to_dict
from bistro.services.settings import get_settings, settings_to_dict
from bistro.services.staff import list_staff, staff_to_dict
from bistro.services.tables import list_tables, table_to_dict


def _load_orders(db: Session) -> list[dict]:
    return [order_to_dict(order) for order in list_orders(db)]


def _load_menu(db: Session) -> list[dict]:
    return [item_to_dict(item) for item in list_items(db)]


def _load_categories(db: Session) -> list[dict]:
    return [category_to_dict(category) for category in list_categories(db)]


def _load_tables(db: Session) -> list[dict]:
    return [table_to_dict(table) for table in list_tables(db)]


def _load_settings(db: Session) -> list[dict]:
    return [settings_to_dict(get_settings(db))]


def _load_staff(db: Session) -> list[dict]:
    return [staff_to_dict(member) for member in list_staff(db)]


orders_feed = LiveFeed("orders", _load_orders, SessionLocal)
menu_feed = LiveFeed("menu", _load_menu, SessionLocal)
categories_feed = LiveFeed("categories", _load_categories, SessionLocal)
tables_feed = LiveFeed("tables", _load_tables, SessionLocal)
settings_feed = LiveFeed("settings", _load_settings, SessionLocal)
staff_feed = LiveFeed("staff", _load_staff, SessionLocal)

FEEDS: dict[str, LiveFeed] = {
    feed.name: feed for feed in (orders_feed, menu_feed, categories_feed, tables_feed, settings_feed, staff_feed)
}


def get_feed(name: str) -> LiveFeed:
    try:
        return FEEDS[name]
    except KeyError:
        raise NotFoundError(f"Unknown feed: {name}") from None


def bind_feeds(session_factory: SessionFactory) -> None:
    for feed in FEEDS.values():
        feed.bind(session_factory)
