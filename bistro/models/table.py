from sqlalchemy import Column, Float, Integer, String

from bistro.core.database import Base


class DiningTable(Base):
    __tablename__ = "tables"

    id = Column(Integer, primary_key=True)
    number = Column(String(20), index=True, nullable=False)
    seats = Column(Integer, default=2, nullable=False)

    # Floor-plan position as a percentage of the canvas, 0..100
    x = Column(Float, default=50.0, nullable=False)
    y = Column(Float, default=50.0, nullable=False)

    status = Column(String(20), default="available", nullable=False)  # available / occupied / reserved
    reservation_time = Column(String(40), default="", nullable=False)
