from sqlalchemy import Column, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from bistro.core.database import Base


class OrderItem(Base):
    """Line snapshot taken at submit time; later menu edits never reach it."""

    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True)
    order_id = Column(String(32), ForeignKey("orders.id", ondelete="CASCADE"), index=True, nullable=False)
    position = Column(Integer, nullable=False, default=0)
    # No FK: the menu item may be deleted later
    menu_item_id = Column(Integer, nullable=True)

    name = Column(String(160), nullable=False)
    price_cents = Column(Integer, nullable=False, default=0)
    quantity = Column(Integer, nullable=False, default=1)
    category = Column(String(120), nullable=True)
    notes = Column(Text, nullable=True)

    order = relationship("Order", back_populates="items")
