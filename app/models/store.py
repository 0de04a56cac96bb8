from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.core.database import Base


class Store(Base):
    """Store location with its public slug and IANA timezone."""

    __tablename__ = "stores"

    # Core identity
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    slug = Column(String(100), unique=True, nullable=True, index=True)

    # Profile
    phone = Column(String(50), nullable=True)
    email = Column(String(255), nullable=True)
    address = Column(Text, nullable=True)

    # Wall-clock of every appointment shown or offered for this store.
    # A store without a timezone has no bookable availability.
    timezone = Column(String(64), nullable=True, default="UTC")

    is_active = Column(Boolean, default=True, nullable=False)

    # Audit timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    # Relationships
    business_hours = relationship(
        "BusinessHours", back_populates="store", cascade="all, delete-orphan"
    )
    staff = relationship("Staff", back_populates="store")
    services = relationship("Service", back_populates="store")

    def __repr__(self):
        return f"<Store(id={self.id}, name='{self.name}', tz={self.timezone})>"
