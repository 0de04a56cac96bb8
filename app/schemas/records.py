"""Typed records read by the availability engine.

The SQL repository builds these from ORM rows (``from_attributes``); tests and
other data sources build them directly.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from app.services.timezone import ensure_utc


class _Record(BaseModel):
    model_config = ConfigDict(from_attributes=True, frozen=True)


class StoreRecord(_Record):
    id: int
    name: str
    slug: Optional[str] = None
    timezone: Optional[str] = None
    is_active: bool = True


class BusinessHoursRecord(_Record):
    store_id: int
    day_of_week: int
    open_time: str
    close_time: str
    is_closed: bool = False


class StaffAvailabilityRuleRecord(_Record):
    id: Optional[int] = None
    staff_id: int
    day_of_week: int
    start_time: str
    end_time: str


class StaffRecord(_Record):
    id: int
    store_id: int
    name: str
    is_active: bool = True


class ServiceRecord(_Record):
    id: int
    store_id: int
    name: str
    duration_minutes: int
    category: str = "General"
    is_active: bool = True


class AppointmentRecord(_Record):
    id: int
    store_id: int
    staff_id: int
    service_id: Optional[int] = None
    customer_id: Optional[int] = None
    date: datetime
    duration: int
    status: str = "pending"

    @field_validator("date")
    @classmethod
    def normalise_date(cls, v: datetime) -> datetime:
        # Backends without timezone support hand back naive UTC values
        return ensure_utc(v)


class CalendarSettingsRecord(_Record):
    store_id: int
    time_slot_interval: int = 15
    allow_booking_outside_hours: bool = True
