from sqlalchemy import Column, DateTime, Integer, String, func
from sqlalchemy.orm import relationship

from bistro.core.database import Base


class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True)
    name = Column(String(120), nullable=False)
    # Display position on the customer menu, ascending
    order = Column("sort_order", Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    items = relationship("MenuItem", back_populates="category")
