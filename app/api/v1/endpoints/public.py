from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from app.api.deps.store import (
    StoreContext,
    get_availability_service,
    get_booking_service,
    get_public_store_context,
    get_schedule_service,
)
from app.schemas.appointment import AppointmentResponse, PublicBookingRequest
from app.schemas.availability import TimeSlot
from app.schemas.schedule import BusinessHoursResponse
from app.schemas.store import PublicStoreResponse
from app.services.availability import AvailabilityService
from app.services.booking import BookingService
from app.services.store_schedule import StoreScheduleService
from app.services.timezone import get_timezone_abbr, is_valid_timezone

router = APIRouter()


@router.get("/store/{slug}", response_model=PublicStoreResponse)
async def get_public_store(
    context: StoreContext = Depends(get_public_store_context),
    schedule_service: StoreScheduleService = Depends(get_schedule_service),
):
    """Store profile and opening hours for the public booking page."""
    store = context.store
    hours = await schedule_service.get_business_hours(store.id)
    return PublicStoreResponse(
        id=store.id,
        name=store.name,
        slug=store.slug,
        phone=store.phone,
        email=store.email,
        address=store.address,
        timezone=store.timezone if is_valid_timezone(store.timezone) else None,
        timezone_abbr=(
            get_timezone_abbr(store.timezone)
            if is_valid_timezone(store.timezone)
            else None
        ),
        business_hours=[BusinessHoursResponse.model_validate(h) for h in hours],
    )


@router.get("/store/{slug}/availability", response_model=List[TimeSlot])
async def get_public_availability(
    slug: str,
    service_id: int = Query(..., alias="serviceId"),
    date: str = Query(..., description="Store-local date (YYYY-MM-DD)"),
    duration: int = Query(..., description="Total minutes including add-ons"),
    staff_id: Optional[int] = Query(None, alias="staffId"),
    availability_service: AvailabilityService = Depends(get_availability_service),
):
    """Same slots as ``/availability``, addressed by the store's public slug."""
    return await availability_service.get_public_available_slots(
        slug=slug,
        service_id=service_id,
        date=date,
        duration=duration,
        staff_id=staff_id,
        request_time=datetime.now(timezone.utc),
    )


@router.post(
    "/store/{slug}/book",
    response_model=AppointmentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def book_public_appointment(
    slug: str,
    request: PublicBookingRequest,
    booking_service: BookingService = Depends(get_booking_service),
):
    """Customer-facing booking. The appointment is created as pending."""
    return await booking_service.book_public(slug, request)
