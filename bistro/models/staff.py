from sqlalchemy import BigInteger, Column, Integer, String

from bistro.core.database import Base


class StaffMember(Base):
    __tablename__ = "staff"

    id = Column(Integer, primary_key=True)
    name = Column(String(120), nullable=False)
    role = Column(String(20), default="waiter", nullable=False)  # admin / kitchen / waiter
    status = Column(String(20), default="active", nullable=False)  # active / on-break / off-duty
    joined_at = Column(BigInteger, index=True, nullable=False)
    orders_handled = Column(Integer, default=0, nullable=False)
    phone = Column(String(30), nullable=True)
    avatar_url = Column(String, nullable=True)
