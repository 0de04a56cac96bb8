from datetime import date, timedelta
from typing import Iterable

import structlog

from app.models.appointment import AppointmentStatus
from app.repositories.availability import AvailabilityDataSource
from app.schemas.records import AppointmentRecord
from app.services.intervals import TimeInterval, merge_intervals
from app.services.timezone import to_store_local

logger = structlog.get_logger(__name__)


def collect_busy_intervals(
    appointments: Iterable[AppointmentRecord],
    local_date: date,
    timezone_name: str,
) -> list[TimeInterval]:
    """Merged busy intervals for appointments on the store-local date.

    Cancelled appointments and appointments whose local start date differs
    from ``local_date`` are ignored. Intervals hold UTC instants; comparing
    in UTC keeps minute arithmetic correct across DST transitions.
    """
    intervals = []
    for appointment in appointments:
        if appointment.status == AppointmentStatus.CANCELLED.value:
            continue
        if to_store_local(appointment.date, timezone_name).date != local_date:
            continue
        if appointment.duration <= 0:
            logger.warning(
                "Ignoring appointment with non-positive duration",
                appointment_id=appointment.id,
                duration=appointment.duration,
            )
            continue
        intervals.append(
            TimeInterval(
                start=appointment.date,
                end=appointment.date + timedelta(minutes=appointment.duration),
            )
        )
    # Appointments are not supposed to overlap; merge anyway so slot
    # generation works on a clean set
    return merge_intervals(intervals)


class BusyIntervalCollector:
    def __init__(self, data_source: AvailabilityDataSource):
        self.data_source = data_source

    async def collect(
        self, store_id: int, staff_id: int, local_date: date, timezone_name: str
    ) -> list[TimeInterval]:
        appointments = await self.data_source.get_appointments_for_staff_on_date(
            staff_id, store_id, local_date, timezone_name
        )
        return collect_busy_intervals(appointments, local_date, timezone_name)
