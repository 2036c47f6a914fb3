from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, String

from bistro.core.database import Base


class OrderAuditLog(Base):
    __tablename__ = "order_audit_log"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(String(32), nullable=False, index=True)
    action = Column(String(40), nullable=False)
    from_value = Column(String(40), nullable=True)
    to_value = Column(String(40), nullable=True)
    actor = Column(String(64), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
