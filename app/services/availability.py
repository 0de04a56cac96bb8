import asyncio
from datetime import date as date_type
from datetime import datetime
from typing import Optional, Union

import structlog

from app.core.config import settings
from app.core.exceptions import InvalidRequestError, ResourceNotFoundError
from app.repositories.availability import AvailabilityDataSource
from app.schemas.availability import TimeSlot
from app.schemas.records import ServiceRecord, StaffRecord, StoreRecord
from app.services.busy_intervals import BusyIntervalCollector
from app.services.slots import generate_slot_starts
from app.services.timezone import ensure_utc, is_valid_timezone, to_iso_utc
from app.services.working_hours import WorkingHoursResolver

logger = structlog.get_logger(__name__)


def parse_local_date(value: Union[str, date_type]) -> date_type:
    """Parse a ``YYYY-MM-DD`` store-local calendar date."""
    if isinstance(value, datetime):
        raise InvalidRequestError("date must be a calendar date, not a datetime")
    if isinstance(value, date_type):
        return value
    try:
        if len(value) != 10:
            raise ValueError(value)
        return date_type.fromisoformat(value)
    except (TypeError, ValueError):
        raise InvalidRequestError(f"Invalid date {value!r}, expected YYYY-MM-DD")


class AvailabilityService:
    """Computes bookable slots for a service on a store-local date.

    The result is a snapshot: it holds no reservation, and two callers can
    both be offered the same slot. The booking write path re-checks for
    overlaps when the appointment is inserted.
    """

    def __init__(self, data_source: AvailabilityDataSource):
        self.data_source = data_source
        self.working_hours = WorkingHoursResolver(data_source)
        self.busy_intervals = BusyIntervalCollector(data_source)

    async def get_available_slots(
        self,
        store_id: int,
        service_id: int,
        date: Union[str, date_type],
        duration: int,
        staff_id: Optional[int] = None,
        request_time: Optional[datetime] = None,
        granularity: Optional[int] = None,
    ) -> list[TimeSlot]:
        """
        Get bookable slots for one staff member or for any capable staff.

        Args:
            store_id: Store the booking is for
            service_id: Service being booked
            date: Store-local date (``YYYY-MM-DD``)
            duration: Total minutes including add-ons
            staff_id: Specific staff member, or None for any staff
            request_time: Slots starting before this instant are not offered
            granularity: Step between candidate starts; defaults to the
                store's calendar interval

        Returns:
            Slots sorted by time, then by staff id. Empty when the store is
            closed, misconfigured or fully booked.
        """
        local_date = parse_local_date(date)
        self._validate_duration(duration)
        if granularity is not None and granularity <= 0:
            raise InvalidRequestError("granularity must be a positive number of minutes")

        store = await self.data_source.get_store(store_id)
        if store is None:
            raise ResourceNotFoundError("Store", store_id)

        return await self._compute(
            store, service_id, local_date, duration, staff_id, request_time, granularity
        )

    async def get_public_available_slots(
        self,
        slug: str,
        service_id: int,
        date: Union[str, date_type],
        duration: int,
        staff_id: Optional[int] = None,
        request_time: Optional[datetime] = None,
    ) -> list[TimeSlot]:
        """Same as :meth:`get_available_slots`, scoped by public store slug."""
        local_date = parse_local_date(date)
        self._validate_duration(duration)

        store = await self.data_source.get_store_by_slug(slug)
        if store is None or not store.is_active:
            raise ResourceNotFoundError("Store", slug)

        return await self._compute(
            store, service_id, local_date, duration, staff_id, request_time, None
        )

    @staticmethod
    def _validate_duration(duration: int) -> None:
        if duration <= 0:
            raise InvalidRequestError("duration must be a positive number of minutes")
        if duration > settings.MAX_SLOT_DURATION_MINUTES:
            raise InvalidRequestError(
                f"duration cannot exceed {settings.MAX_SLOT_DURATION_MINUTES} minutes"
            )

    async def _compute(
        self,
        store: StoreRecord,
        service_id: int,
        local_date: date_type,
        duration: int,
        staff_id: Optional[int],
        request_time: Optional[datetime],
        granularity: Optional[int],
    ) -> list[TimeSlot]:
        service = await self.data_source.get_service(service_id)
        if service is None or service.store_id != store.id or not service.is_active:
            raise ResourceNotFoundError("Service", service_id)

        if staff_id is not None:
            staff = await self.data_source.get_staff_member(staff_id)
            if staff is None or staff.store_id != store.id:
                raise ResourceNotFoundError("Staff", staff_id)
            candidates = [staff] if staff.is_active else []
        else:
            candidates = await self._candidate_staff(service, store.id)

        if not is_valid_timezone(store.timezone):
            logger.warning(
                "Store has no usable timezone, no availability offered",
                store_id=store.id,
                timezone=store.timezone,
            )
            return []

        if not candidates:
            logger.info(
                "No staff can perform service",
                store_id=store.id,
                service_id=service.id,
            )
            return []

        step = granularity or await self._store_granularity(store.id)
        not_before = ensure_utc(request_time) if request_time else None

        # Independent read-only lookups; any failure fails the whole request
        per_staff = await asyncio.gather(
            *(
                self._slots_for_staff(
                    store, member, local_date, duration, step, not_before
                )
                for member in candidates
            )
        )

        ranked = sorted(
            (start, member.id, member.name)
            for starts, member in zip(per_staff, candidates)
            for start in starts
        )
        slots = [
            TimeSlot(time=to_iso_utc(start), staff_id=member_id, staff_name=name)
            for start, member_id, name in ranked
        ]

        logger.info(
            "Availability computed",
            store_id=store.id,
            service_id=service.id,
            date=str(local_date),
            staff_id=staff_id,
            staff_count=len(candidates),
            duration=duration,
            granularity=step,
            slot_count=len(slots),
        )
        return slots

    async def _candidate_staff(
        self, service: ServiceRecord, store_id: int
    ) -> list[StaffRecord]:
        assigned = await self.data_source.get_staff_for_service(service.id)
        if not assigned:
            return await self.data_source.get_active_staff(store_id)
        # A restricted service stays restricted even when none of its
        # assigned staff can work here today
        return [
            member
            for member in assigned
            if member.store_id == store_id and member.is_active
        ]

    async def _store_granularity(self, store_id: int) -> int:
        calendar = await self.data_source.get_calendar_settings(store_id)
        if calendar and calendar.time_slot_interval > 0:
            return calendar.time_slot_interval
        return settings.DEFAULT_SLOT_INTERVAL_MINUTES

    async def _slots_for_staff(
        self,
        store: StoreRecord,
        staff: StaffRecord,
        local_date: date_type,
        duration: int,
        granularity: int,
        not_before: Optional[datetime],
    ) -> list[datetime]:
        windows = await self.working_hours.resolve(store.id, staff.id, local_date)
        if not windows:
            return []

        busy = await self.busy_intervals.collect(
            store.id, staff.id, local_date, store.timezone
        )
        return generate_slot_starts(
            windows, busy, duration, granularity, store.timezone, not_before
        )
