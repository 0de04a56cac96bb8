import enum

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.core.database import Base


class StaffRole(enum.Enum):
    STYLIST = "stylist"
    RECEPTIONIST = "receptionist"
    MANAGER = "manager"


class Staff(Base):
    """Staff member working at a store."""

    __tablename__ = "staff"

    # Core identity
    id = Column(Integer, primary_key=True, index=True)
    store_id = Column(Integer, ForeignKey("stores.id"), nullable=False, index=True)
    name = Column(String, nullable=False)
    email = Column(String, nullable=True)
    phone = Column(String, nullable=True)

    # Profile information
    role = Column(String(20), nullable=False, default=StaffRole.STYLIST.value)
    bio = Column(Text, nullable=True)
    color = Column(String(7), nullable=True, default="#3b82f6")  # Calendar colour
    avatar_url = Column(String, nullable=True)

    is_active = Column(Boolean, default=True, nullable=False)

    # Audit timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    # Relationships
    store = relationship("Store", back_populates="staff")
    staff_services = relationship(
        "StaffService", back_populates="staff", cascade="all, delete-orphan"
    )
    availability_rules = relationship(
        "StaffAvailabilityRule", back_populates="staff", cascade="all, delete-orphan"
    )

    def __repr__(self):
        return (
            f"<Staff(id={self.id}, name='{self.name}', role={self.role}, "
            f"active={self.is_active})>"
        )
