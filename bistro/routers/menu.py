from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from bistro.core.database import get_db
from bistro.services import menu as menu_service
from bistro.services.settings import is_store_open

router = APIRouter(prefix="/api/menu", tags=["menu"])


class CategoryCreate(BaseModel):
    name: str
    order: Optional[int] = None


class CategoryUpdate(BaseModel):
    name: Optional[str] = None
    order: Optional[int] = None


class MenuItemCreate(BaseModel):
    name: str
    description: str = ""
    price: float = Field(..., ge=0)
    category_id: Optional[int] = None
    image_url: Optional[str] = None
    sold_out: bool = False


class MenuItemUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = Field(default=None, ge=0)
    category_id: Optional[int] = None
    image_url: Optional[str] = None
    sold_out: Optional[bool] = None


@router.get("")
def public_menu(db: Session = Depends(get_db)):
    return menu_service.build_public_menu(db, is_open=is_store_open(db))


@router.get("/catalog")
def admin_catalog(db: Session = Depends(get_db)):
    return menu_service.build_catalog(db)


@router.get("/categories")
def list_categories(db: Session = Depends(get_db)):
    return [menu_service.category_to_dict(category) for category in menu_service.list_categories(db)]


@router.post("/categories", status_code=201)
def create_category(payload: CategoryCreate, db: Session = Depends(get_db)):
    category = menu_service.create_category(db, payload.name, payload.order)
    return menu_service.category_to_dict(category)


@router.patch("/categories/{category_id}")
def update_category(category_id: int, payload: CategoryUpdate, db: Session = Depends(get_db)):
    category = menu_service.update_category(db, category_id, payload.model_dump(exclude_unset=True))
    return menu_service.category_to_dict(category)


@router.delete("/categories/{category_id}", status_code=204)
def delete_category(category_id: int, db: Session = Depends(get_db)):
    menu_service.delete_category(db, category_id)


@router.get("/items")
def list_items(category_id: Optional[int] = None, db: Session = Depends(get_db)):
    return [menu_service.item_to_dict(item) for item in menu_service.list_items(db, category_id)]


@router.post("/items", status_code=201)
def create_item(payload: MenuItemCreate, db: Session = Depends(get_db)):
    item = menu_service.create_item(db, payload.model_dump())
    return menu_service.item_to_dict(item)


@router.patch("/items/{item_id}")
def update_item(item_id: int, payload: MenuItemUpdate, db: Session = Depends(get_db)):
    item = menu_service.update_item(db, item_id, payload.model_dump(exclude_unset=True))
    return menu_service.item_to_dict(item)


@router.post("/items/{item_id}/toggle-sold-out")
def toggle_sold_out(item_id: int, db: Session = Depends(get_db)):
    return menu_service.item_to_dict(menu_service.toggle_sold_out(db, item_id))


@router.delete("/items/{item_id}", status_code=204)
def delete_item(item_id: int, db: Session = Depends(get_db)):
    menu_service.delete_item(db, item_id)
