from datetime import date

import pytest

from app.schemas.records import AppointmentRecord
from app.services.busy_intervals import BusyIntervalCollector, collect_busy_intervals
from app.services.intervals import TimeInterval
from tests.fixtures.memory_source import InMemoryDataSource
from tests.fixtures.salon_fixtures import utc

NEW_YORK = "America/New_York"
MONDAY = date(2024, 1, 15)


def appointment(appointment_id, start, duration, status="confirmed", staff_id=1):
    return AppointmentRecord(
        id=appointment_id,
        store_id=1,
        staff_id=staff_id,
        date=start,
        duration=duration,
        status=status,
    )


class TestCollectBusyIntervals:
    def test_interval_per_appointment(self):
        busy = collect_busy_intervals(
            [appointment(1, utc(2024, 1, 15, 15, 0), 60)], MONDAY, NEW_YORK
        )
        assert busy == [TimeInterval(utc(2024, 1, 15, 15, 0), utc(2024, 1, 15, 16, 0))]

    def test_cancelled_ignored(self):
        busy = collect_busy_intervals(
            [appointment(1, utc(2024, 1, 15, 15, 0), 60, status="cancelled")],
            MONDAY,
            NEW_YORK,
        )
        assert busy == []

    def test_other_local_date_ignored(self):
        # 03:00Z on the 16th is still the 15th in New York; 06:00Z is not
        appointments = [
            appointment(1, utc(2024, 1, 16, 3, 0), 30),
            appointment(2, utc(2024, 1, 16, 6, 0), 30),
        ]
        busy = collect_busy_intervals(appointments, MONDAY, NEW_YORK)
        assert busy == [TimeInterval(utc(2024, 1, 16, 3, 0), utc(2024, 1, 16, 3, 30))]

    def test_overlapping_appointments_merged(self):
        appointments = [
            appointment(1, utc(2024, 1, 15, 15, 0), 60),
            appointment(2, utc(2024, 1, 15, 15, 30), 60),
            appointment(3, utc(2024, 1, 15, 18, 0), 30),
        ]
        busy = collect_busy_intervals(appointments, MONDAY, NEW_YORK)
        assert busy == [
            TimeInterval(utc(2024, 1, 15, 15, 0), utc(2024, 1, 15, 16, 30)),
            TimeInterval(utc(2024, 1, 15, 18, 0), utc(2024, 1, 15, 18, 30)),
        ]

    def test_add_on_time_included_in_duration(self):
        busy = collect_busy_intervals(
            [appointment(1, utc(2024, 1, 15, 15, 0), 45)], MONDAY, NEW_YORK
        )
        assert busy[0].end == utc(2024, 1, 15, 15, 45)

    def test_non_positive_duration_ignored(self):
        busy = collect_busy_intervals(
            [appointment(1, utc(2024, 1, 15, 15, 0), 0)], MONDAY, NEW_YORK
        )
        assert busy == []


class TestBusyIntervalCollector:
    @pytest.mark.asyncio
    async def test_collects_only_requested_staff(self):
        source = InMemoryDataSource(
            appointments=[
                appointment(1, utc(2024, 1, 15, 15, 0), 60, staff_id=1),
                appointment(2, utc(2024, 1, 15, 17, 0), 60, staff_id=2),
            ]
        )
        busy = await BusyIntervalCollector(source).collect(1, 2, MONDAY, NEW_YORK)
        assert busy == [TimeInterval(utc(2024, 1, 15, 17, 0), utc(2024, 1, 15, 18, 0))]
