from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from app.models.appointment import AppointmentStatus
from app.services.timezone import ensure_utc


class AppointmentBase(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AppointmentCreate(AppointmentBase):
    store_id: int
    staff_id: int
    service_id: int
    customer_id: Optional[int] = None
    date: datetime
    duration: Optional[int] = Field(
        None, gt=0, description="Total minutes; defaults to service plus add-ons"
    )
    addon_ids: List[int] = Field(default_factory=list)
    status: AppointmentStatus = AppointmentStatus.PENDING
    notes: Optional[str] = None

    @field_validator("date")
    @classmethod
    def validate_date(cls, v):
        return ensure_utc(v)

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        if v == AppointmentStatus.CANCELLED:
            raise ValueError("Cannot create a cancelled appointment")
        return v


class AppointmentCancel(AppointmentBase):
    reason: Optional[str] = Field(None, max_length=500)


class PublicBookingRequest(AppointmentBase):
    service_id: int
    staff_id: int
    date: datetime
    duration: int = Field(..., gt=0)
    customer_name: str = Field(..., min_length=1, max_length=255)
    customer_email: Optional[str] = Field(None, max_length=255)
    customer_phone: Optional[str] = Field(None, max_length=30)
    notes: Optional[str] = None

    @field_validator("date")
    @classmethod
    def validate_date(cls, v):
        return ensure_utc(v)

    @field_validator("customer_email")
    @classmethod
    def validate_email(cls, v):
        if v and "@" not in v:
            raise ValueError("Invalid email format")
        return v


class AppointmentResponse(AppointmentBase):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )

    id: int
    store_id: int
    staff_id: int
    service_id: int
    customer_id: Optional[int] = None
    date: datetime
    duration: int
    status: str
    notes: Optional[str] = None
    cancellation_reason: Optional[str] = None

    @field_validator("date")
    @classmethod
    def validate_date(cls, v):
        return ensure_utc(v)
