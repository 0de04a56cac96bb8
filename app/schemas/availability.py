from pydantic import BaseModel, ConfigDict, Field


class TimeSlot(BaseModel):
    """A bookable start time paired with the staff member who is free then."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    time: str = Field(..., description="Slot start as an ISO-8601 UTC string")
    staff_id: int = Field(..., alias="staffId")
    staff_name: str = Field(..., alias="staffName")
