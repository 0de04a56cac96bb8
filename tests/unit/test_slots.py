from datetime import date, datetime

import pytest

from app.services.intervals import TimeInterval
from app.services.slots import generate_slot_starts
from app.services.timezone import store_local_to_utc, to_local_datetime
from app.services.working_hours import LocalWindow
from tests.fixtures.salon_fixtures import utc

NEW_YORK = "America/New_York"


def local_window(day: date, start_hour: int, end_hour: int) -> LocalWindow:
    return LocalWindow(
        start=datetime(day.year, day.month, day.day, start_hour),
        end=datetime(day.year, day.month, day.day, end_hour),
    )


def local_times(starts, day_tz=NEW_YORK):
    return [to_local_datetime(s, day_tz).strftime("%H:%M") for s in starts]


class TestGenerateSlotStarts:
    def test_busy_hour_excluded(self):
        monday = date(2024, 1, 15)
        busy = [TimeInterval(utc(2024, 1, 15, 15, 0), utc(2024, 1, 15, 16, 0))]

        starts = generate_slot_starts(
            [local_window(monday, 9, 17)], busy, 30, 30, NEW_YORK
        )

        expected = ["09:00", "09:30"] + [
            f"{h:02d}:{m:02d}" for h in range(11, 17) for m in (0, 30)
        ]
        assert local_times(starts) == expected
        assert starts[0] == utc(2024, 1, 15, 14, 0)

    def test_slot_must_end_inside_window(self):
        monday = date(2024, 1, 15)
        starts = generate_slot_starts([local_window(monday, 9, 11)], [], 60, 30, NEW_YORK)
        assert local_times(starts) == ["09:00", "09:30", "10:00"]

    def test_slot_may_end_when_busy_starts(self):
        monday = date(2024, 1, 15)
        busy = [TimeInterval(utc(2024, 1, 15, 14, 30), utc(2024, 1, 15, 15, 0))]
        starts = generate_slot_starts([local_window(monday, 9, 11)], busy, 30, 15, NEW_YORK)
        assert local_times(starts) == ["09:00", "10:00", "10:15", "10:30"]

    def test_granularity_finer_than_duration(self):
        monday = date(2024, 1, 15)
        starts = generate_slot_starts([local_window(monday, 9, 10)], [], 45, 15, NEW_YORK)
        assert local_times(starts) == ["09:00", "09:15"]

    def test_duration_longer_than_window(self):
        monday = date(2024, 1, 15)
        assert generate_slot_starts([local_window(monday, 9, 10)], [], 90, 15, NEW_YORK) == []

    def test_non_positive_duration_yields_nothing(self):
        monday = date(2024, 1, 15)
        assert generate_slot_starts([local_window(monday, 9, 17)], [], 0, 15, NEW_YORK) == []

    def test_non_positive_granularity_rejected(self):
        monday = date(2024, 1, 15)
        with pytest.raises(ValueError):
            generate_slot_starts([local_window(monday, 9, 17)], [], 30, 0, NEW_YORK)

    def test_multiple_windows_in_order(self):
        monday = date(2024, 1, 15)
        windows = [local_window(monday, 14, 15), local_window(monday, 9, 10)]
        starts = generate_slot_starts(windows, [], 30, 30, NEW_YORK)
        assert local_times(starts) == ["09:00", "09:30", "14:00", "14:30"]

    def test_not_before_drops_past_slots(self):
        monday = date(2024, 1, 15)
        starts = generate_slot_starts(
            [local_window(monday, 9, 12)],
            [],
            30,
            30,
            NEW_YORK,
            not_before=utc(2024, 1, 15, 15, 10),  # 10:10 local
        )
        assert local_times(starts) == ["10:30", "11:00", "11:30"]

    def test_spring_forward_skips_missing_hour(self):
        # 2024-03-10: New York clocks jump from 02:00 to 03:00
        sunday = date(2024, 3, 10)
        starts = generate_slot_starts([local_window(sunday, 0, 5)], [], 60, 60, NEW_YORK)

        assert local_times(starts) == ["00:00", "01:00", "03:00", "04:00"]
        for start in starts:
            local = to_local_datetime(start, NEW_YORK)
            assert store_local_to_utc(local, NEW_YORK) == start

    def test_fall_back_day_keeps_utc_spacing(self):
        # 2024-11-03: 01:00-02:00 happens twice in New York
        sunday = date(2024, 11, 3)
        starts = generate_slot_starts([local_window(sunday, 0, 3)], [], 60, 60, NEW_YORK)

        assert starts == [
            utc(2024, 11, 3, 4, 0),
            utc(2024, 11, 3, 5, 0),
            utc(2024, 11, 3, 6, 0),
            utc(2024, 11, 3, 7, 0),
        ]
