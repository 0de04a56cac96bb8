from typing import List

from fastapi import APIRouter, Depends, Query, status

from app.api.deps.store import get_schedule_service
from app.schemas.schedule import (
    BusinessHoursResponse,
    BusinessHoursUpdate,
    CalendarSettingsResponse,
    CalendarSettingsUpdate,
    StaffAvailabilityRuleResponse,
    StaffAvailabilityUpdate,
)
from app.services.store_schedule import StoreScheduleService

router = APIRouter()


# Business hours


@router.get("/business-hours", response_model=List[BusinessHoursResponse])
async def get_business_hours(
    store_id: int = Query(..., alias="storeId"),
    schedule_service: StoreScheduleService = Depends(get_schedule_service),
):
    """Opening hours of a store ordered by day of week (0 = Sunday)."""
    return await schedule_service.get_business_hours(store_id)


@router.put("/business-hours", response_model=List[BusinessHoursResponse])
async def update_business_hours(
    update: BusinessHoursUpdate,
    schedule_service: StoreScheduleService = Depends(get_schedule_service),
):
    """Replace a store's opening hours."""
    return await schedule_service.replace_business_hours(update)


# Staff availability rules


@router.get(
    "/staff/{staff_id}/availability",
    response_model=List[StaffAvailabilityRuleResponse],
)
async def get_staff_availability(
    staff_id: int,
    schedule_service: StoreScheduleService = Depends(get_schedule_service),
):
    return await schedule_service.get_staff_rules(staff_id)


@router.put(
    "/staff/{staff_id}/availability",
    response_model=List[StaffAvailabilityRuleResponse],
)
async def update_staff_availability(
    staff_id: int,
    update: StaffAvailabilityUpdate,
    schedule_service: StoreScheduleService = Depends(get_schedule_service),
):
    """Replace a staff member's weekly working rules."""
    return await schedule_service.replace_staff_rules(staff_id, update)


@router.delete(
    "/staff-availability/{rule_id}", status_code=status.HTTP_204_NO_CONTENT
)
async def delete_staff_availability_rule(
    rule_id: int,
    schedule_service: StoreScheduleService = Depends(get_schedule_service),
):
    await schedule_service.delete_staff_rule(rule_id)


# Calendar settings


@router.get("/calendar-settings", response_model=CalendarSettingsResponse)
async def get_calendar_settings(
    store_id: int = Query(..., alias="storeId"),
    schedule_service: StoreScheduleService = Depends(get_schedule_service),
):
    return await schedule_service.get_calendar_settings(store_id)


@router.put("/calendar-settings", response_model=CalendarSettingsResponse)
async def update_calendar_settings(
    update: CalendarSettingsUpdate,
    schedule_service: StoreScheduleService = Depends(get_schedule_service),
):
    """Create or update a store's calendar settings."""
    return await schedule_service.update_calendar_settings(update)
