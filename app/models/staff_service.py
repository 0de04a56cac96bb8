from sqlalchemy import Column, DateTime, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.core.database import Base


class StaffService(Base):
    """Assignment of a service to a staff member who can perform it.

    A service without any assignment can be performed by every active staff
    member of its store.
    """

    __tablename__ = "staff_services"

    id = Column(Integer, primary_key=True, index=True)
    staff_id = Column(Integer, ForeignKey("staff.id"), nullable=False)
    service_id = Column(Integer, ForeignKey("services.id"), nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    staff = relationship("Staff", back_populates="staff_services")
    service = relationship("Service", back_populates="staff_services")

    __table_args__ = (
        UniqueConstraint("staff_id", "service_id", name="uq_staff_service"),
    )

    def __repr__(self):
        return (
            f"<StaffService(id={self.id}, staff_id={self.staff_id}, "
            f"service_id={self.service_id})>"
        )
