from typing import Optional

from fastapi import APIRouter, Body, Depends, status

from app.api.deps.store import get_booking_service
from app.schemas.appointment import (
    AppointmentCancel,
    AppointmentCreate,
    AppointmentResponse,
)
from app.services.booking import BookingService

router = APIRouter()


@router.post("", response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
async def create_appointment(
    appointment_data: AppointmentCreate,
    booking_service: BookingService = Depends(get_booking_service),
):
    """Create an appointment after re-checking the staff member's calendar."""
    return await booking_service.create_appointment(appointment_data)


@router.get("/{appointment_id}", response_model=AppointmentResponse)
async def get_appointment(
    appointment_id: int,
    booking_service: BookingService = Depends(get_booking_service),
):
    return await booking_service.get_appointment(appointment_id)


@router.post("/{appointment_id}/cancel", response_model=AppointmentResponse)
async def cancel_appointment(
    appointment_id: int,
    cancel_data: Optional[AppointmentCancel] = Body(None),
    booking_service: BookingService = Depends(get_booking_service),
):
    """Cancel an appointment; its time becomes bookable again."""
    reason = cancel_data.reason if cancel_data else None
    return await booking_service.cancel_appointment(appointment_id, reason)
