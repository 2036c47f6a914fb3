from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from sqlalchemy.orm import Session

from bistro.core.money import from_cents, to_cents
from bistro.errors import NotFoundError, ValidationError
from bistro.models.category import Category
from bistro.models.menu_item import MenuItem
from bistro.services.store_events import emit_menu_updated

logger = logging.getLogger(__name__)

_ITEM_FIELDS = ("name", "description", "category_id", "image_url", "sold_out")


def _price_to_cents(price: Any) -> int:
    try:
        cents = to_cents(price)
    except ValueError as exc:
        raise ValidationError("Price must be a number") from exc
    if cents < 0:
        raise ValidationError("Price cannot be negative")
    return cents


def list_categories(db: Session) -> list[Category]:
    return db.query(Category).order_by(Category.order.asc(), Category.id.asc()).all()


def get_category(db: Session, category_id: int) -> Category:
    category = db.query(Category).filter(Category.id == category_id).first()
    if not category:
        raise NotFoundError("Category not found")
    return category


def create_category(db: Session, name: str, order: Optional[int] = None) -> Category:
    name = (name or "").strip()
    if not name:
        raise ValidationError("Category name is required")
    if order is None:
        # New categories go to the end
        order = db.query(Category).count()
    category = Category(name=name, order=order)
    db.add(category)
    db.commit()
    db.refresh(category)
    emit_menu_updated("category.create", category.id)
    return category


def update_category(db: Session, category_id: int, changes: Mapping[str, Any]) -> Category:
    category = get_category(db, category_id)
    if "name" in changes:
        name = (changes["name"] or "").strip()
        if not name:
            raise ValidationError("Category name is required")
        category.name = name
    if changes.get("order") is not None:
        category.order = int(changes["order"])
    db.commit()
    db.refresh(category)
    emit_menu_updated("category.update", category.id)
    return category


def delete_category(db: Session, category_id: int) -> None:
    category = get_category(db, category_id)
    db.query(MenuItem).filter(MenuItem.category_id == category.id).update(
        {MenuItem.category_id: None}, synchronize_session=False
    )
    db.delete(category)
    db.commit()
    emit_menu_updated("category.delete", category_id)


def list_items(db: Session, category_id: Optional[int] = None) -> list[MenuItem]:
    query = db.query(MenuItem)
    if category_id is not None:
        query = query.filter(MenuItem.category_id == category_id)
    return query.order_by(MenuItem.name.asc(), MenuItem.id.asc()).all()


def get_item(db: Session, item_id: int) -> MenuItem:
    item = db.query(MenuItem).filter(MenuItem.id == item_id).first()
    if not item:
        raise NotFoundError("Menu item not found")
    return item


def _apply_item_changes(db: Session, item: MenuItem, changes: Mapping[str, Any]) -> None:
    for key in _ITEM_FIELDS:
        if key not in changes:
            continue
        value = changes[key]
        if key == "name":
            value = (value or "").strip()
            if not value:
                raise ValidationError("Item name is required")
        if key == "category_id" and value is not None:
            get_category(db, value)
        if key == "description":
            value = value or ""
        if key == "sold_out":
            value = bool(value)
        setattr(item, key, value)
    if "price" in changes:
        item.price_cents = _price_to_cents(changes["price"])


def create_item(db: Session, data: Mapping[str, Any]) -> MenuItem:
    if "price" not in data:
        raise ValidationError("Price is required")
    item = MenuItem(name="", description="", sold_out=False)
    _apply_item_changes(db, item, dict(data, name=data.get("name")))
    db.add(item)
    db.commit()
    db.refresh(item)
    emit_menu_updated("item.create", item.id)
    return item


def update_item(db: Session, item_id: int, changes: Mapping[str, Any]) -> MenuItem:
    item = get_item(db, item_id)
    _apply_item_changes(db, item, changes)
    db.commit()
    db.refresh(item)
    emit_menu_updated("item.update", item.id)
    return item


def toggle_sold_out(db: Session, item_id: int) -> MenuItem:
    item = get_item(db, item_id)
    item.sold_out = not item.sold_out
    db.commit()
    db.refresh(item)
    logger.info("menu item %s sold_out=%s", item.id, item.sold_out)
    emit_menu_updated("item.sold_out", item.id)
    return item


def delete_item(db: Session, item_id: int) -> None:
    """Historical order lines keep their own snapshot."""
    item = get_item(db, item_id)
    db.delete(item)
    db.commit()
    emit_menu_updated("item.delete", item_id)


def category_to_dict(category: Category) -> dict[str, Any]:
    return {"id": category.id, "name": category.name, "order": category.order}


def item_to_dict(item: MenuItem) -> dict[str, Any]:
    return {
        "id": item.id,
        "name": item.name,
        "description": item.description,
        "price": from_cents(item.price_cents),
        "price_cents": item.price_cents,
        "category_id": item.category_id,
        "image_url": item.image_url,
        "sold_out": bool(item.sold_out),
    }


def build_catalog(db: Session) -> dict[str, Any]:
    return {
        "categories": [category_to_dict(category) for category in list_categories(db)],
        "items": [item_to_dict(item) for item in list_items(db)],
    }


def build_public_menu(db: Session, is_open: bool) -> dict[str, Any]:
    """Customer menu: categories in display order, each with its items; empty categories omitted."""
    items_by_category: dict[int, list[dict[str, Any]]] = {}
    for item in list_items(db):
        if item.category_id is None:
            continue
        items_by_category.setdefault(item.category_id, []).append(item_to_dict(item))

    sections = []
    for category in list_categories(db):
        entries = items_by_category.get(category.id)
        if not entries:
            continue
        sections.append({**category_to_dict(category), "items": entries})
    return {"is_open": is_open, "categories": sections}
