from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.core.database import Base


class BusinessHours(Base):
    """Store opening hours for one weekday (0 = Sunday ... 6 = Saturday)."""

    __tablename__ = "business_hours"

    id = Column(Integer, primary_key=True, index=True)
    store_id = Column(Integer, ForeignKey("stores.id"), nullable=False)
    day_of_week = Column(Integer, nullable=False)

    # Store-local "HH:MM"
    open_time = Column(String(5), nullable=False, default="09:00")
    close_time = Column(String(5), nullable=False, default="17:00")
    is_closed = Column(Boolean, default=False, nullable=False)

    # Audit timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    store = relationship("Store", back_populates="business_hours")

    __table_args__ = (
        UniqueConstraint("store_id", "day_of_week", name="uq_business_hours_store_day"),
    )

    def __repr__(self):
        hours = "closed" if self.is_closed else f"{self.open_time}-{self.close_time}"
        return (
            f"<BusinessHours(store_id={self.store_id}, "
            f"day={self.day_of_week}: {hours})>"
        )
