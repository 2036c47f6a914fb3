from sqlalchemy import BigInteger, Boolean, Column, Integer, String
from sqlalchemy.orm import relationship

from bistro.core.database import Base


class Order(Base):
    __tablename__ = "orders"

    id = Column(String(32), primary_key=True)
    table_number = Column(String(20), index=True, nullable=False)

    # pending / in-progress / completed
    status = Column(String(20), default="pending", index=True, nullable=False)
    total_cents = Column(Integer, default=0, nullable=False)
    priority = Column(Boolean, default=False, nullable=False)

    # Epoch milliseconds
    timestamp = Column(BigInteger, index=True, nullable=False)
    completed_at = Column(BigInteger, nullable=True)

    # Payment intent id; at most one order per successful payment
    payment_ref = Column(String(120), unique=True, nullable=True)
    # Cart that submitted the order, when it came through checkout
    cart_id = Column(String(32), nullable=True)

    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.position",
        lazy="selectin",
    )
