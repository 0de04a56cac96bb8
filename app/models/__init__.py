# Import all models to ensure they are registered with SQLAlchemy
from . import (
    appointment,
    appointment_addon,
    business_hours,
    calendar_settings,
    customer,
    service,
    service_addon,
    staff,
    staff_availability,
    staff_service,
    store,
)

__all__ = [
    "appointment",
    "appointment_addon",
    "business_hours",
    "calendar_settings",
    "customer",
    "service",
    "service_addon",
    "staff",
    "staff_availability",
    "staff_service",
    "store",
]
