from datetime import datetime, timedelta, timezone
from typing import List, Optional

import structlog
from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import (
    InvalidRequestError,
    ResourceNotFoundError,
    SlotConflictError,
)
from app.models.appointment import Appointment, AppointmentStatus
from app.models.appointment_addon import AppointmentAddon
from app.models.calendar_settings import CalendarSettings
from app.models.customer import Customer
from app.models.service import Service
from app.models.service_addon import ServiceAddon
from app.models.staff import Staff
from app.models.store import Store
from app.repositories.availability import SqlAvailabilityRepository
from app.schemas.appointment import AppointmentCreate, PublicBookingRequest
from app.services.intervals import TimeInterval
from app.services.timezone import (
    ensure_utc,
    is_valid_timezone,
    store_local_to_utc,
    to_store_local,
)
from app.services.working_hours import resolve_working_windows

logger = structlog.get_logger(__name__)


class BookingService:
    """Appointment write path.

    Availability answers are snapshots and hold no reservation, so every
    booking re-checks the staff member's calendar while holding a lock on the
    staff row.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_appointment(self, data: AppointmentCreate) -> Appointment:
        """
        Book an appointment from the staff calendar.

        Args:
            data: Booking request; ``duration`` defaults to the service
                duration plus the extra time of every add-on

        Returns:
            The stored appointment

        Raises:
            ResourceNotFoundError: store, service, staff or customer unknown
            InvalidRequestError: bad add-on ids or outside working hours
            SlotConflictError: the staff member is already booked
        """
        store = await self._get_store(data.store_id)
        service = await self._get_service(data.service_id, store.id)

        if data.customer_id is not None:
            await self._get_customer(data.customer_id, store.id)

        addons = await self._get_addons(data.addon_ids, store.id)
        duration = data.duration
        if duration is None:
            duration = service.duration_minutes + sum(
                addon.extra_duration_minutes for addon in addons
            )

        return await self._book(
            store=store,
            staff_id=data.staff_id,
            service=service,
            customer_id=data.customer_id,
            start=data.date,
            duration=duration,
            status=data.status.value,
            notes=data.notes,
            addons=addons,
        )

    async def book_public(
        self, slug: str, request: PublicBookingRequest
    ) -> Appointment:
        """Customer-facing booking; the appointment starts out pending."""
        store = await self._get_store_by_slug(slug)
        service = await self._get_service(request.service_id, store.id)
        customer = await self._find_or_create_customer(store.id, request)

        return await self._book(
            store=store,
            staff_id=request.staff_id,
            service=service,
            customer_id=customer.id,
            start=request.date,
            duration=request.duration,
            status=AppointmentStatus.PENDING.value,
            notes=request.notes,
            addons=[],
        )

    async def get_appointment(self, appointment_id: int) -> Appointment:
        result = await self.db.execute(
            select(Appointment).where(Appointment.id == appointment_id)
        )
        appointment = result.scalar_one_or_none()
        if appointment is None:
            raise ResourceNotFoundError("Appointment", appointment_id)
        return appointment

    async def cancel_appointment(
        self, appointment_id: int, reason: Optional[str] = None
    ) -> Appointment:
        """Cancel an appointment, which frees its time for new bookings."""
        appointment = await self.get_appointment(appointment_id)

        if appointment.is_cancelled:
            return appointment
        if appointment.status == AppointmentStatus.COMPLETED.value:
            raise InvalidRequestError("Cannot cancel a completed appointment")

        appointment.status = AppointmentStatus.CANCELLED.value
        appointment.cancellation_reason = reason
        appointment.cancelled_at = datetime.now(timezone.utc)
        await self.db.commit()
        await self.db.refresh(appointment)

        logger.info(
            "Appointment cancelled",
            appointment_id=appointment.id,
            staff_id=appointment.staff_id,
        )
        return appointment

    async def _book(
        self,
        store: Store,
        staff_id: int,
        service: Service,
        customer_id: Optional[int],
        start: datetime,
        duration: int,
        status: str,
        notes: Optional[str],
        addons: List[ServiceAddon],
    ) -> Appointment:
        start = ensure_utc(start)
        if duration <= 0:
            raise InvalidRequestError("duration must be a positive number of minutes")
        if duration > settings.MAX_SLOT_DURATION_MINUTES:
            raise InvalidRequestError(
                f"duration cannot exceed {settings.MAX_SLOT_DURATION_MINUTES} minutes"
            )
        end = start + timedelta(minutes=duration)

        try:
            # Serialises concurrent bookings for the same staff member
            staff = await self._lock_staff(staff_id, store.id)
            if not staff.is_active:
                raise InvalidRequestError("Staff member is not active")

            await self._check_conflicts(staff.id, start, end)
            await self._check_working_hours(store, staff.id, start, end)

            appointment = Appointment(
                store_id=store.id,
                staff_id=staff.id,
                service_id=service.id,
                customer_id=customer_id,
                date=start,
                duration=duration,
                status=status,
                notes=notes,
            )
            self.db.add(appointment)
            await self.db.flush()

            for addon in addons:
                self.db.add(
                    AppointmentAddon(
                        appointment_id=appointment.id,
                        addon_id=addon.id,
                        addon_name=addon.name,
                        addon_price=addon.price,
                        addon_duration_minutes=addon.extra_duration_minutes,
                    )
                )

            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        await self.db.refresh(appointment)
        logger.info(
            "Appointment booked",
            appointment_id=appointment.id,
            store_id=store.id,
            staff_id=staff_id,
            start=start.isoformat(),
            duration=duration,
            status=status,
        )
        return appointment

    async def _lock_staff(self, staff_id: int, store_id: int) -> Staff:
        result = await self.db.execute(
            select(Staff)
            .where(and_(Staff.id == staff_id, Staff.store_id == store_id))
            .with_for_update()
        )
        staff = result.scalar_one_or_none()
        if staff is None:
            raise ResourceNotFoundError("Staff", staff_id)
        return staff

    async def _check_conflicts(
        self, staff_id: int, start: datetime, end: datetime
    ) -> None:
        # No appointment is longer than the duration cap, which bounds how
        # early an overlapping appointment can start
        earliest = start - timedelta(minutes=settings.MAX_SLOT_DURATION_MINUTES)
        result = await self.db.execute(
            select(Appointment).where(
                and_(
                    Appointment.staff_id == staff_id,
                    Appointment.status != AppointmentStatus.CANCELLED.value,
                    Appointment.date < end,
                    Appointment.date > earliest,
                )
            )
        )
        for existing in result.scalars().all():
            existing_start = ensure_utc(existing.date)
            existing_end = existing_start + timedelta(minutes=existing.duration)
            if existing_start < end and start < existing_end:
                logger.warning(
                    "Booking conflict",
                    staff_id=staff_id,
                    requested_start=start.isoformat(),
                    conflicting_appointment_id=existing.id,
                )
                raise SlotConflictError(
                    "The selected time is no longer available for this staff member"
                )

    async def _check_working_hours(
        self, store: Store, staff_id: int, start: datetime, end: datetime
    ) -> None:
        result = await self.db.execute(
            select(CalendarSettings).where(CalendarSettings.store_id == store.id)
        )
        calendar = result.scalar_one_or_none()
        if calendar is None or calendar.allow_booking_outside_hours:
            return

        if not is_valid_timezone(store.timezone):
            raise InvalidRequestError("Store has no valid timezone configured")

        local_date = to_store_local(start, store.timezone).date
        repository = SqlAvailabilityRepository(self.db)
        windows = resolve_working_windows(
            local_date,
            await repository.get_business_hours(store.id),
            await repository.get_staff_availability_rules(staff_id),
        )
        for window in windows:
            working = TimeInterval(
                start=store_local_to_utc(window.start, store.timezone),
                end=store_local_to_utc(window.end, store.timezone),
            )
            if working.contains(start, end):
                return

        raise InvalidRequestError("Appointment is outside the staff member's working hours")

    async def _find_or_create_customer(
        self, store_id: int, request: PublicBookingRequest
    ) -> Customer:
        digits = "".join(ch for ch in (request.customer_phone or "") if ch.isdigit())
        if digits:
            result = await self.db.execute(
                select(Customer).where(
                    and_(Customer.store_id == store_id, Customer.phone.isnot(None))
                )
            )
            for customer in result.scalars().all():
                if customer.phone_digits == digits:
                    return customer

        customer = Customer(
            store_id=store_id,
            name=request.customer_name,
            email=request.customer_email,
            phone=request.customer_phone,
        )
        self.db.add(customer)
        await self.db.flush()
        logger.info("Customer created from public booking", customer_id=customer.id)
        return customer

    async def _get_store(self, store_id: int) -> Store:
        result = await self.db.execute(select(Store).where(Store.id == store_id))
        store = result.scalar_one_or_none()
        if store is None:
            raise ResourceNotFoundError("Store", store_id)
        return store

    async def _get_store_by_slug(self, slug: str) -> Store:
        result = await self.db.execute(select(Store).where(Store.slug == slug))
        store = result.scalar_one_or_none()
        if store is None or not store.is_active:
            raise ResourceNotFoundError("Store", slug)
        return store

    async def _get_service(self, service_id: int, store_id: int) -> Service:
        result = await self.db.execute(
            select(Service).where(
                and_(Service.id == service_id, Service.store_id == store_id)
            )
        )
        service = result.scalar_one_or_none()
        if service is None or not service.is_active:
            raise ResourceNotFoundError("Service", service_id)
        return service

    async def _get_customer(self, customer_id: int, store_id: int) -> Customer:
        result = await self.db.execute(
            select(Customer).where(
                and_(Customer.id == customer_id, Customer.store_id == store_id)
            )
        )
        customer = result.scalar_one_or_none()
        if customer is None:
            raise ResourceNotFoundError("Customer", customer_id)
        return customer

    async def _get_addons(
        self, addon_ids: List[int], store_id: int
    ) -> List[ServiceAddon]:
        if not addon_ids:
            return []

        result = await self.db.execute(
            select(ServiceAddon).where(
                and_(
                    ServiceAddon.id.in_(addon_ids),
                    ServiceAddon.store_id == store_id,
                    ServiceAddon.is_active,
                )
            )
        )
        addons = list(result.scalars().all())
        missing = set(addon_ids) - {addon.id for addon in addons}
        if missing:
            raise InvalidRequestError(
                f"Unknown or inactive add-ons: {', '.join(str(i) for i in sorted(missing))}"
            )
        return addons
