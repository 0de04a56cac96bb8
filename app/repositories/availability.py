import asyncio
from datetime import date
from typing import Optional, Protocol

import structlog
from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.appointment import Appointment, AppointmentStatus
from app.models.business_hours import BusinessHours
from app.models.calendar_settings import CalendarSettings
from app.models.service import Service
from app.models.staff import Staff
from app.models.staff_availability import StaffAvailabilityRule
from app.models.staff_service import StaffService
from app.models.store import Store
from app.schemas.records import (
    AppointmentRecord,
    BusinessHoursRecord,
    CalendarSettingsRecord,
    ServiceRecord,
    StaffAvailabilityRuleRecord,
    StaffRecord,
    StoreRecord,
)
from app.services.timezone import local_day_bounds_utc

logger = structlog.get_logger(__name__)


class AvailabilityDataSource(Protocol):
    """Read-only collaborator the availability engine pulls its data from."""

    async def get_store(self, store_id: int) -> Optional[StoreRecord]: ...

    async def get_store_by_slug(self, slug: str) -> Optional[StoreRecord]: ...

    async def get_service(self, service_id: int) -> Optional[ServiceRecord]: ...

    async def get_staff_member(self, staff_id: int) -> Optional[StaffRecord]: ...

    async def get_active_staff(self, store_id: int) -> list[StaffRecord]: ...

    async def get_staff_for_service(self, service_id: int) -> list[StaffRecord]: ...

    async def get_business_hours(self, store_id: int) -> list[BusinessHoursRecord]: ...

    async def get_staff_availability_rules(
        self, staff_id: int
    ) -> list[StaffAvailabilityRuleRecord]: ...

    async def get_appointments_for_staff_on_date(
        self, staff_id: int, store_id: int, local_date: date, timezone_name: str
    ) -> list[AppointmentRecord]: ...

    async def get_calendar_settings(
        self, store_id: int
    ) -> Optional[CalendarSettingsRecord]: ...


class SqlAvailabilityRepository:
    """SQLAlchemy implementation of :class:`AvailabilityDataSource`."""

    def __init__(self, db: AsyncSession):
        self.db = db
        # An AsyncSession cannot run statements concurrently; per-staff
        # lookups fanned out with asyncio.gather queue up here.
        self._lock = asyncio.Lock()

    async def _scalars(self, query) -> list:
        async with self._lock:
            result = await self.db.execute(query)
            return list(result.scalars().all())

    async def _scalar(self, query):
        async with self._lock:
            result = await self.db.execute(query)
            return result.scalar_one_or_none()

    async def get_store(self, store_id: int) -> Optional[StoreRecord]:
        store = await self._scalar(select(Store).where(Store.id == store_id))
        return StoreRecord.model_validate(store) if store else None

    async def get_store_by_slug(self, slug: str) -> Optional[StoreRecord]:
        store = await self._scalar(select(Store).where(Store.slug == slug))
        return StoreRecord.model_validate(store) if store else None

    async def get_service(self, service_id: int) -> Optional[ServiceRecord]:
        service = await self._scalar(select(Service).where(Service.id == service_id))
        return ServiceRecord.model_validate(service) if service else None

    async def get_staff_member(self, staff_id: int) -> Optional[StaffRecord]:
        staff = await self._scalar(select(Staff).where(Staff.id == staff_id))
        return StaffRecord.model_validate(staff) if staff else None

    async def get_active_staff(self, store_id: int) -> list[StaffRecord]:
        rows = await self._scalars(
            select(Staff)
            .where(and_(Staff.store_id == store_id, Staff.is_active))
            .order_by(Staff.id)
        )
        return [StaffRecord.model_validate(s) for s in rows]

    async def get_staff_for_service(self, service_id: int) -> list[StaffRecord]:
        """Every staff member assigned to the service, active or not.

        Any assignment row restricts the service, so callers filter by store
        and active flag only after that decision.
        """
        rows = await self._scalars(
            select(Staff)
            .join(StaffService, StaffService.staff_id == Staff.id)
            .where(StaffService.service_id == service_id)
            .order_by(Staff.id)
        )
        return [StaffRecord.model_validate(s) for s in rows]

    async def get_business_hours(self, store_id: int) -> list[BusinessHoursRecord]:
        rows = await self._scalars(
            select(BusinessHours)
            .where(BusinessHours.store_id == store_id)
            .order_by(BusinessHours.day_of_week)
        )
        return [BusinessHoursRecord.model_validate(h) for h in rows]

    async def get_staff_availability_rules(
        self, staff_id: int
    ) -> list[StaffAvailabilityRuleRecord]:
        rows = await self._scalars(
            select(StaffAvailabilityRule)
            .where(StaffAvailabilityRule.staff_id == staff_id)
            .order_by(StaffAvailabilityRule.day_of_week, StaffAvailabilityRule.start_time)
        )
        return [StaffAvailabilityRuleRecord.model_validate(r) for r in rows]

    async def get_appointments_for_staff_on_date(
        self, staff_id: int, store_id: int, local_date: date, timezone_name: str
    ) -> list[AppointmentRecord]:
        """Non-cancelled appointments starting on the store-local date."""
        day_start, day_end = local_day_bounds_utc(local_date, timezone_name)
        rows = await self._scalars(
            select(Appointment)
            .where(
                and_(
                    Appointment.staff_id == staff_id,
                    Appointment.store_id == store_id,
                    Appointment.status != AppointmentStatus.CANCELLED.value,
                    Appointment.date >= day_start,
                    Appointment.date < day_end,
                )
            )
            .order_by(Appointment.date)
        )
        logger.debug(
            "Loaded staff appointments",
            staff_id=staff_id,
            store_id=store_id,
            date=str(local_date),
            count=len(rows),
        )
        return [AppointmentRecord.model_validate(a) for a in rows]

    async def get_calendar_settings(
        self, store_id: int
    ) -> Optional[CalendarSettingsRecord]:
        settings_row = await self._scalar(
            select(CalendarSettings).where(CalendarSettings.store_id == store_id)
        )
        return CalendarSettingsRecord.model_validate(settings_row) if settings_row else None
