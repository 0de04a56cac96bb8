from typing import List

import structlog
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ResourceNotFoundError
from app.models.business_hours import BusinessHours
from app.models.calendar_settings import CalendarSettings
from app.models.staff import Staff
from app.models.staff_availability import StaffAvailabilityRule
from app.models.store import Store
from app.schemas.schedule import (
    BusinessHoursUpdate,
    CalendarSettingsResponse,
    CalendarSettingsUpdate,
    StaffAvailabilityUpdate,
)

logger = structlog.get_logger(__name__)


class StoreScheduleService:
    """Operator configuration that feeds the availability engine.

    Business hours, staff availability rules and calendar settings are all
    replaced wholesale; the engine reads them back through the availability
    repository.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    # Business hours

    async def get_business_hours(self, store_id: int) -> List[BusinessHours]:
        await self._get_store(store_id)
        result = await self.db.execute(
            select(BusinessHours)
            .where(BusinessHours.store_id == store_id)
            .order_by(BusinessHours.day_of_week)
        )
        return list(result.scalars().all())

    async def replace_business_hours(
        self, update: BusinessHoursUpdate
    ) -> List[BusinessHours]:
        """
        Replace every business-hours row of a store.

        Args:
            update: Store id and one entry per configured weekday

        Returns:
            The new rows ordered by day of week
        """
        await self._get_store(update.store_id)
        try:
            # Bulk delete runs immediately, so the unique (store, day) rows are
            # gone before the new ones are flushed
            await self.db.execute(
                delete(BusinessHours).where(BusinessHours.store_id == update.store_id)
            )
            for entry in update.hours:
                self.db.add(
                    BusinessHours(
                        store_id=update.store_id,
                        day_of_week=entry.day_of_week,
                        open_time=entry.open_time,
                        close_time=entry.close_time,
                        is_closed=entry.is_closed,
                    )
                )
            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            logger.error(
                "Failed to replace business hours",
                store_id=update.store_id,
                error=str(e),
            )
            raise

        logger.info(
            "Business hours replaced",
            store_id=update.store_id,
            days=[entry.day_of_week for entry in update.hours],
        )
        return await self.get_business_hours(update.store_id)

    # Staff availability rules

    async def get_staff_rules(self, staff_id: int) -> List[StaffAvailabilityRule]:
        await self._get_staff(staff_id)
        result = await self.db.execute(
            select(StaffAvailabilityRule)
            .where(StaffAvailabilityRule.staff_id == staff_id)
            .order_by(
                StaffAvailabilityRule.day_of_week, StaffAvailabilityRule.start_time
            )
        )
        return list(result.scalars().all())

    async def replace_staff_rules(
        self, staff_id: int, update: StaffAvailabilityUpdate
    ) -> List[StaffAvailabilityRule]:
        """Replace a staff member's weekly rules. Overlapping rules are kept as given."""
        await self._get_staff(staff_id)
        try:
            await self.db.execute(
                delete(StaffAvailabilityRule).where(
                    StaffAvailabilityRule.staff_id == staff_id
                )
            )
            for rule in update.rules:
                self.db.add(
                    StaffAvailabilityRule(
                        staff_id=staff_id,
                        day_of_week=rule.day_of_week,
                        start_time=rule.start_time,
                        end_time=rule.end_time,
                    )
                )
            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            logger.error(
                "Failed to replace staff availability", staff_id=staff_id, error=str(e)
            )
            raise

        logger.info(
            "Staff availability replaced", staff_id=staff_id, rules=len(update.rules)
        )
        return await self.get_staff_rules(staff_id)

    async def delete_staff_rule(self, rule_id: int) -> None:
        result = await self.db.execute(
            select(StaffAvailabilityRule).where(StaffAvailabilityRule.id == rule_id)
        )
        rule = result.scalar_one_or_none()
        if rule is None:
            raise ResourceNotFoundError("Availability rule", rule_id)

        await self.db.delete(rule)
        await self.db.commit()
        logger.info("Staff availability rule deleted", rule_id=rule_id)

    # Calendar settings

    async def get_calendar_settings(self, store_id: int) -> CalendarSettingsResponse:
        """Stored settings, or the defaults when the store never saved any."""
        await self._get_store(store_id)
        row = await self._get_calendar_row(store_id)
        if row is None:
            return CalendarSettingsResponse(store_id=store_id)
        return CalendarSettingsResponse.model_validate(row)

    async def update_calendar_settings(
        self, update: CalendarSettingsUpdate
    ) -> CalendarSettingsResponse:
        await self._get_store(update.store_id)
        row = await self._get_calendar_row(update.store_id)
        if row is None:
            defaults = CalendarSettingsResponse(store_id=update.store_id)
            row = CalendarSettings(**defaults.model_dump())
            self.db.add(row)

        changes = update.model_dump(exclude_unset=True, exclude={"store_id"})
        for field, value in changes.items():
            if value is not None:
                setattr(row, field, value)

        await self.db.commit()
        await self.db.refresh(row)

        logger.info(
            "Calendar settings updated",
            store_id=update.store_id,
            fields=sorted(changes),
        )
        return CalendarSettingsResponse.model_validate(row)

    # Helpers

    async def _get_store(self, store_id: int) -> Store:
        result = await self.db.execute(select(Store).where(Store.id == store_id))
        store = result.scalar_one_or_none()
        if store is None:
            raise ResourceNotFoundError("Store", store_id)
        return store

    async def _get_staff(self, staff_id: int) -> Staff:
        result = await self.db.execute(select(Staff).where(Staff.id == staff_id))
        staff = result.scalar_one_or_none()
        if staff is None:
            raise ResourceNotFoundError("Staff", staff_id)
        return staff

    async def _get_calendar_row(self, store_id: int):
        result = await self.db.execute(
            select(CalendarSettings).where(CalendarSettings.store_id == store_id)
        )
        return result.scalar_one_or_none()
