from sqlalchemy import Boolean, Column, DateTime, String, func

from bistro.core.database import Base

GENERAL_SETTINGS_ID = "general"


class StoreSettings(Base):
    __tablename__ = "store_settings"

    id = Column(String(32), primary_key=True, default=GENERAL_SETTINGS_ID)
    is_open = Column(Boolean, default=True, nullable=False)
    restaurant_name = Column(String(160), nullable=True)
    logo_url = Column(String, nullable=True)
    contact_email = Column(String(255), nullable=True)
    address = Column(String, nullable=True)
    currency = Column(String(8), nullable=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
