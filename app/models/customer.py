from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.sql import func

from app.core.database import Base


class Customer(Base):
    """Store customer, looked up by phone on public bookings."""

    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, index=True)
    store_id = Column(Integer, ForeignKey("stores.id"), nullable=False, index=True)

    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True)
    phone = Column(String(30), nullable=True, index=True)
    notes = Column(Text, nullable=True)

    # Audit timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    @property
    def phone_digits(self) -> str:
        return "".join(ch for ch in (self.phone or "") if ch.isdigit())

    def __repr__(self):
        return f"<Customer(id={self.id}, name='{self.name}', store_id={self.store_id})>"
