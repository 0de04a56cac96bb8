from typing import List, Optional

import pytz
from pydantic import Field, field_validator

from app.schemas.schedule import BusinessHoursResponse, CamelModel


def validate_timezone(timezone: str) -> str:
    """Validate timezone string."""
    try:
        pytz.timezone(timezone)
    except pytz.UnknownTimeZoneError:
        raise ValueError(f"Invalid timezone: {timezone}")
    return timezone


class PublicStoreResponse(CamelModel):
    """Store profile shown on the public booking page."""

    id: int
    name: str
    slug: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    timezone: Optional[str] = Field(None, description="IANA timezone name")
    timezone_abbr: Optional[str] = None
    business_hours: List[BusinessHoursResponse] = Field(default_factory=list)

    @field_validator("timezone")
    @classmethod
    def validate_timezone_field(cls, v):
        if v is not None:
            return validate_timezone(v)
        return v
