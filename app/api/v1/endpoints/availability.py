from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from app.api.deps.store import get_availability_service
from app.schemas.availability import TimeSlot
from app.services.availability import AvailabilityService

router = APIRouter()


@router.get("", response_model=List[TimeSlot])
@router.get("/slots", response_model=List[TimeSlot])
async def get_availability(
    service_id: int = Query(..., alias="serviceId", description="Service being booked"),
    store_id: int = Query(..., alias="storeId", description="Store id"),
    date: str = Query(..., description="Store-local date (YYYY-MM-DD)"),
    duration: int = Query(
        ..., description="Total minutes including add-ons"
    ),
    staff_id: Optional[int] = Query(
        None, alias="staffId", description="Specific staff member; omit for any staff"
    ),
    availability_service: AvailabilityService = Depends(get_availability_service),
):
    """
    Bookable start times for a service on a store-local date.

    Slots are ISO-8601 UTC instants sorted by time, then staff id. Starts
    already in the past are not offered.
    """
    return await availability_service.get_available_slots(
        store_id=store_id,
        service_id=service_id,
        date=date,
        duration=duration,
        staff_id=staff_id,
        request_time=datetime.now(timezone.utc),
    )
