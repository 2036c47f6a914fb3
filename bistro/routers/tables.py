from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from bistro.core.database import get_db
from bistro.services import tables as table_service

router = APIRouter(prefix="/api/tables", tags=["tables"])


class TableCreate(BaseModel):
    number: str
    seats: int = Field(default=2, ge=1)


class TableMove(BaseModel):
    x: float
    y: float
    # Drop frame: always written
    final: bool = False


class TableStatusUpdate(BaseModel):
    status: str
    reservation_time: Optional[str] = None


@router.get("")
def list_tables(db: Session = Depends(get_db)):
    return [table_service.table_to_dict(table) for table in table_service.list_tables(db)]


@router.post("", status_code=201)
def create_table(payload: TableCreate, db: Session = Depends(get_db)):
    return table_service.table_to_dict(table_service.create_table(db, payload.number, payload.seats))


@router.delete("/{table_id}", status_code=204)
def delete_table(table_id: int, db: Session = Depends(get_db)):
    table_service.delete_table(db, table_id)


@router.post("/{table_id}/move")
def move_table(table_id: int, payload: TableMove, db: Session = Depends(get_db)):
    result = table_service.move_table(db, table_id, payload.x, payload.y, final=payload.final)
    return table_service.table_to_dict(result.table, persisted=result.persisted, x=result.x, y=result.y)


@router.post("/{table_id}/status")
def set_table_status(table_id: int, payload: TableStatusUpdate, db: Session = Depends(get_db)):
    table = table_service.set_table_status(db, table_id, payload.status, payload.reservation_time)
    return table_service.table_to_dict(table)


@router.get("/{table_id}/orders")
def table_orders(table_id: int, db: Session = Depends(get_db)):
    table = table_service.get_table(db, table_id)
    return {"table": table_service.table_to_dict(table), **table_service.table_orders(db, table)}
