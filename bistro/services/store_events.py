from __future__ import annotations

from typing import Any

from bistro.services.event_bus import event_bus

MENU_UPDATED = "menu.updated"
TABLES_UPDATED = "tables.updated"
SETTINGS_UPDATED = "settings.updated"
STAFF_UPDATED = "staff.updated"


def _emit(event_name: str, action: str, entity_id: Any = None) -> None:
    event_bus.emit(event_name, {"action": action, "entity_id": entity_id})


def emit_menu_updated(action: str, entity_id: Any = None) -> None:
    _emit(MENU_UPDATED, action, entity_id)


def emit_tables_updated(action: str, entity_id: Any = None) -> None:
    _emit(TABLES_UPDATED, action, entity_id)


def emit_settings_updated(action: str = "update") -> None:
    _emit(SETTINGS_UPDATED, action)


def emit_staff_updated(action: str, entity_id: Any = None) -> None:
    _emit(STAFF_UPDATED, action, entity_id)
