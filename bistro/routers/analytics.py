from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from bistro.core.database import get_db
from bistro.services.analytics import compute_analytics
from bistro.services.orders import list_orders, order_to_dict

router = APIRouter(prefix="/api/analytics", tags=["analytics"])


@router.get("")
def get_analytics(db: Session = Depends(get_db)):
    return compute_analytics(order_to_dict(order) for order in list_orders(db))
