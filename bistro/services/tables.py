from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass
from threading import Lock
from typing import Any, Optional

from sqlalchemy.orm import Session

from bistro.core.clock import MS_PER_HOUR, now_ms
from bistro.core.config import TABLE_MOVE_MIN_INTERVAL_MS
from bistro.errors import NotFoundError, ValidationError
from bistro.models.table import DiningTable
from bistro.services.orders import ACTIVE_STATUSES, COMPLETED, list_orders_for_table, order_to_dict
from bistro.services.store_events import emit_tables_updated

logger = logging.getLogger(__name__)

TABLE_STATUSES = ("available", "occupied", "reserved")
DEFAULT_POSITION = 50.0
DEFAULT_SEATS = 2
RECENT_WINDOW_MS = MS_PER_HOUR


class MoveThrottle:
    """Per-table minimum spacing between persisted drag frames."""

    def __init__(self, *, min_interval_ms: int = TABLE_MOVE_MIN_INTERVAL_MS) -> None:
        self.min_interval_ms = min_interval_ms
        self._last_write: dict[int, float] = {}
        self._lock = Lock()

    def allow(self, table_id: int, *, final: bool = False) -> bool:
        now = time.monotonic() * 1000
        with self._lock:
            last = self._last_write.get(table_id)
            if not final and last is not None and now - last < self.min_interval_ms:
                return False
            self._last_write[table_id] = now
            return True

    def forget(self, table_id: int) -> None:
        with self._lock:
            self._last_write.pop(table_id, None)

    def reset(self) -> None:
        with self._lock:
            self._last_write.clear()


move_throttle = MoveThrottle()


@dataclass
class MoveResult:
    table: DiningTable
    x: float
    y: float
    persisted: bool


def clamp_percent(value: Any) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError("Position must be a number") from exc
    if math.isnan(number):
        raise ValidationError("Position must be a number")
    return max(0.0, min(100.0, number))


def list_tables(db: Session) -> list[DiningTable]:
    return db.query(DiningTable).order_by(DiningTable.number.asc(), DiningTable.id.asc()).all()


def get_table(db: Session, table_id: int) -> DiningTable:
    table = db.query(DiningTable).filter(DiningTable.id == table_id).first()
    if not table:
        raise NotFoundError("Table not found")
    return table


def create_table(db: Session, number: str, seats: Optional[int] = None) -> DiningTable:
    number = (number or "").strip()
    if not number:
        raise ValidationError("Table number is required")
    seats = DEFAULT_SEATS if seats is None else int(seats)
    if seats < 1:
        raise ValidationError("A table needs at least one seat")

    table = DiningTable(
        number=number,
        seats=seats,
        x=DEFAULT_POSITION,
        y=DEFAULT_POSITION,
        status="available",
        reservation_time="",
    )
    db.add(table)
    db.commit()
    db.refresh(table)
    emit_tables_updated("create", table.id)
    return table


def delete_table(db: Session, table_id: int) -> None:
    table = get_table(db, table_id)
    db.delete(table)
    db.commit()
    move_throttle.forget(table_id)
    emit_tables_updated("delete", table_id)


def move_table(
    db: Session,
    table_id: int,
    x: Any,
    y: Any,
    *,
    final: bool = False,
    throttle: MoveThrottle = move_throttle,
) -> MoveResult:
    """Throttled drag frames report the clamped position without writing it."""
    table = get_table(db, table_id)
    new_x, new_y = clamp_percent(x), clamp_percent(y)

    if not throttle.allow(table.id, final=final):
        return MoveResult(table, new_x, new_y, persisted=False)

    table.x = new_x
    table.y = new_y
    db.commit()
    db.refresh(table)
    emit_tables_updated("move", table.id)
    return MoveResult(table, table.x, table.y, persisted=True)


def set_table_status(
    db: Session,
    table_id: int,
    status: str,
    reservation_time: Optional[str] = None,
) -> DiningTable:
    status = (status or "").strip().lower()
    if status not in TABLE_STATUSES:
        raise ValidationError(f"Unknown table status: {status!r}")

    table = get_table(db, table_id)
    table.status = status
    table.reservation_time = (reservation_time or "").strip() if status == "reserved" else ""
    db.commit()
    db.refresh(table)
    emit_tables_updated("status", table.id)
    return table


def table_orders(db: Session, table: DiningTable, now: Optional[int] = None) -> dict[str, list[dict]]:
    """Orders linked to a table by matching table number."""
    now = now_ms() if now is None else now
    ongoing: list[dict] = []
    recent: list[dict] = []
    for order in list_orders_for_table(db, table.number):
        if order.status in ACTIVE_STATUSES:
            ongoing.append(order_to_dict(order))
        elif order.status == COMPLETED and now - order.timestamp < RECENT_WINDOW_MS:
            recent.append(order_to_dict(order))
    return {"ongoing": ongoing, "recent": recent}


def table_to_dict(table: DiningTable, *, persisted: Optional[bool] = None, x: Any = None, y: Any = None) -> dict:
    data = {
        "id": table.id,
        "number": table.number,
        "seats": table.seats,
        "x": table.x if x is None else x,
        "y": table.y if y is None else y,
        "status": table.status,
        "reservation_time": table.reservation_time or "",
    }
    if persisted is not None:
        data["persisted"] = persisted
    return data
