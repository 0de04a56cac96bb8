from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.sql import func

from app.core.database import Base


class CalendarSettings(Base):
    """Per-store calendar preferences; `time_slot_interval` drives slot granularity."""

    __tablename__ = "calendar_settings"

    id = Column(Integer, primary_key=True, index=True)
    store_id = Column(Integer, ForeignKey("stores.id"), unique=True, nullable=False)

    start_of_week = Column(String(10), nullable=False, default="monday")
    time_slot_interval = Column(Integer, nullable=False, default=15)  # minutes
    allow_booking_outside_hours = Column(Boolean, nullable=False, default=True)
    auto_complete_appointments = Column(Boolean, nullable=False, default=True)

    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self):
        return (
            f"<CalendarSettings(store_id={self.store_id}, "
            f"interval={self.time_slot_interval}min)>"
        )
