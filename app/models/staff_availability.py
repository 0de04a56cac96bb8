from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.core.database import Base


class StaffAvailabilityRule(Base):
    """Weekly working window for a staff member.

    Several rules may exist for the same staff member and weekday (split
    shifts). Rules that overlap are read as the union of the time they cover.
    """

    __tablename__ = "staff_availability"

    id = Column(Integer, primary_key=True, index=True)
    staff_id = Column(Integer, ForeignKey("staff.id"), nullable=False)
    day_of_week = Column(Integer, nullable=False)  # 0 = Sunday

    # Store-local "HH:MM"
    start_time = Column(String(5), nullable=False)
    end_time = Column(String(5), nullable=False)

    # Audit timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    staff = relationship("Staff", back_populates="availability_rules")

    __table_args__ = (
        Index("ix_staff_availability_staff_day", "staff_id", "day_of_week"),
    )

    def __repr__(self):
        return (
            f"<StaffAvailabilityRule(id={self.id}, staff_id={self.staff_id}, "
            f"day={self.day_of_week}: {self.start_time}-{self.end_time})>"
        )
