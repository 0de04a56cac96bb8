import enum
from datetime import datetime, timedelta

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.core.database import Base


class AppointmentStatus(enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    STARTED = "started"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no-show"


class Appointment(Base):
    """Booked appointment. `date` is always a UTC instant."""

    __tablename__ = "appointments"

    # Core identity
    id = Column(Integer, primary_key=True, index=True)
    store_id = Column(Integer, ForeignKey("stores.id"), nullable=False)

    # Appointment participants
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=True)
    staff_id = Column(Integer, ForeignKey("staff.id"), nullable=False)
    service_id = Column(Integer, ForeignKey("services.id"), nullable=False)

    # Scheduling details
    date = Column(DateTime(timezone=True), nullable=False, index=True)
    duration = Column(Integer, nullable=False)  # minutes, add-on time included

    status = Column(
        String(20), nullable=False, default=AppointmentStatus.PENDING.value, index=True
    )
    notes = Column(Text, nullable=True)
    cancellation_reason = Column(Text, nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)

    # Audit timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    # Constraints
    __table_args__ = (
        CheckConstraint("duration > 0", name="check_positive_duration"),
        Index("ix_appointments_staff_date", "staff_id", "date"),
    )

    # Relationships
    customer = relationship("Customer")
    staff = relationship("Staff")
    service = relationship("Service")
    appointment_addons = relationship(
        "AppointmentAddon", back_populates="appointment", cascade="all, delete-orphan"
    )

    @property
    def end_date(self) -> datetime:
        return self.date + timedelta(minutes=self.duration)

    @property
    def is_cancelled(self) -> bool:
        return self.status == AppointmentStatus.CANCELLED.value

    def __repr__(self):
        return (
            f"<Appointment(id={self.id}, status='{self.status}', "
            f"date='{self.date}', duration={self.duration}, "
            f"staff_id={self.staff_id})>"
        )
