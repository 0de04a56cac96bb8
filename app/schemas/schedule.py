import re
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

HHMM_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")
ALLOWED_SLOT_INTERVALS = (5, 10, 15, 20, 30, 60)


def validate_hhmm(value: str) -> str:
    """Validate a store-local time in HH:MM format."""
    if not HHMM_PATTERN.match(value):
        raise ValueError("Time must be in HH:MM format")
    return value


def validate_slot_interval(value: int) -> int:
    if value not in ALLOWED_SLOT_INTERVALS:
        allowed = ", ".join(str(i) for i in ALLOWED_SLOT_INTERVALS)
        raise ValueError(f"timeSlotInterval must be one of: {allowed}")
    return value


def validate_start_of_week(value: str) -> str:
    if value not in ("sunday", "monday", "saturday"):
        raise ValueError("startOfWeek must be sunday, monday or saturday")
    return value


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )


class BusinessHoursFields(CamelModel):
    day_of_week: int = Field(..., ge=0, le=6, description="0 = Sunday")
    open_time: str = Field("09:00", description="Local opening time (HH:MM)")
    close_time: str = Field("17:00", description="Local closing time (HH:MM)")
    is_closed: bool = False


class BusinessHoursEntry(BusinessHoursFields):
    @field_validator("open_time", "close_time")
    @classmethod
    def validate_time_fields(cls, v):
        return validate_hhmm(v)

    @model_validator(mode="after")
    def validate_close_after_open(self):
        if not self.is_closed and self.close_time <= self.open_time:
            raise ValueError(
                f"Day {self.day_of_week}: close time must be after open time"
            )
        return self


class BusinessHoursUpdate(CamelModel):
    store_id: int
    hours: List[BusinessHoursEntry]

    @model_validator(mode="after")
    def validate_unique_days(self):
        days = [h.day_of_week for h in self.hours]
        if len(days) != len(set(days)):
            raise ValueError("Each day of week may appear only once")
        return self


class BusinessHoursResponse(BusinessHoursFields):
    id: int
    store_id: int


class StaffAvailabilityRuleEntry(CamelModel):
    day_of_week: int = Field(..., ge=0, le=6, description="0 = Sunday")
    start_time: str
    end_time: str

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time_fields(cls, v):
        return validate_hhmm(v)

    @model_validator(mode="after")
    def validate_end_after_start(self):
        if self.end_time <= self.start_time:
            raise ValueError("End time must be after start time")
        return self


class StaffAvailabilityUpdate(CamelModel):
    rules: List[StaffAvailabilityRuleEntry]


class StaffAvailabilityRuleResponse(CamelModel):
    id: int
    staff_id: int
    day_of_week: int
    start_time: str
    end_time: str


class CalendarSettingsBase(CamelModel):
    start_of_week: str = "monday"
    time_slot_interval: int = 15
    allow_booking_outside_hours: bool = True
    auto_complete_appointments: bool = True

    @field_validator("time_slot_interval")
    @classmethod
    def validate_interval(cls, v):
        return validate_slot_interval(v)

    @field_validator("start_of_week")
    @classmethod
    def validate_start_of_week_field(cls, v):
        return validate_start_of_week(v)


class CalendarSettingsUpdate(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    store_id: int
    start_of_week: Optional[str] = None
    time_slot_interval: Optional[int] = None
    allow_booking_outside_hours: Optional[bool] = None
    auto_complete_appointments: Optional[bool] = None

    @field_validator("time_slot_interval")
    @classmethod
    def validate_interval(cls, v):
        if v is not None:
            return validate_slot_interval(v)
        return v

    @field_validator("start_of_week")
    @classmethod
    def validate_start_of_week_field(cls, v):
        if v is not None:
            return validate_start_of_week(v)
        return v


class CalendarSettingsResponse(CalendarSettingsBase):
    store_id: int
