from fastapi import APIRouter

from app.api.v1.endpoints import appointments, availability, public, schedule

api_router = APIRouter()

# Slot search for the staff calendar
api_router.include_router(
    availability.router, prefix="/availability", tags=["availability"]
)

# Appointment booking endpoints
api_router.include_router(
    appointments.router, prefix="/appointments", tags=["appointments"]
)

# Business hours, staff availability rules and calendar settings
api_router.include_router(schedule.router, tags=["schedule"])

# Public booking endpoints (customer-facing)
api_router.include_router(public.router, prefix="/public", tags=["public"])
