from sqlalchemy import Column, DateTime, String, Text, func

from bistro.core.database import Base


class Cart(Base):
    __tablename__ = "carts"

    id = Column(String(32), primary_key=True)
    table_number = Column(String(20), default="", nullable=False)
    # JSON list of {menu_item_id, name, price_cents, category, quantity, notes}
    lines_json = Column(Text, default="[]", nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
