from datetime import date, datetime

import pytest

from app.schemas.records import BusinessHoursRecord, StaffAvailabilityRuleRecord
from app.services.working_hours import (
    LocalWindow,
    WorkingHoursResolver,
    parse_hhmm,
    resolve_working_windows,
)
from tests.fixtures.memory_source import InMemoryDataSource, weekday_hours

MONDAY = date(2024, 1, 15)
SUNDAY = date(2024, 1, 14)


def rule(start, end, day=1, staff_id=1, rule_id=None):
    return StaffAvailabilityRuleRecord(
        id=rule_id, staff_id=staff_id, day_of_week=day, start_time=start, end_time=end
    )


def window(start, end, day=MONDAY):
    return LocalWindow(
        start=datetime.combine(day, datetime.strptime(start, "%H:%M").time()),
        end=datetime.combine(day, datetime.strptime(end, "%H:%M").time()),
    )


class TestParseHHMM:
    def test_valid(self):
        assert parse_hhmm("09:30") == 570
        assert parse_hhmm("00:00") == 0
        assert parse_hhmm("23:59") == 1439

    @pytest.mark.parametrize("value", ["24:00", "9h30", "", "12:60", None])
    def test_invalid(self, value):
        with pytest.raises(ValueError):
            parse_hhmm(value)


class TestResolveWorkingWindows:
    def test_store_hours_when_no_staff_rules(self):
        windows = resolve_working_windows(MONDAY, weekday_hours(1), [])
        assert windows == [window("09:00", "17:00")]

    def test_no_business_hours_row(self):
        hours = [h for h in weekday_hours(1) if h.day_of_week != 1]
        assert resolve_working_windows(MONDAY, hours, []) == []

    def test_closed_day_overrides_staff_rules(self):
        rules = [rule("10:00", "14:00", day=0)]
        assert resolve_working_windows(SUNDAY, weekday_hours(1), rules) == []

    def test_staff_rule_inside_store_hours(self):
        windows = resolve_working_windows(
            MONDAY, weekday_hours(1), [rule("10:00", "14:00")]
        )
        assert windows == [window("10:00", "14:00")]

    def test_staff_rule_clipped_to_store_hours(self):
        windows = resolve_working_windows(
            MONDAY, weekday_hours(1), [rule("07:00", "19:00")]
        )
        assert windows == [window("09:00", "17:00")]

    def test_staff_rule_outside_store_hours_yields_nothing(self):
        windows = resolve_working_windows(
            MONDAY, weekday_hours(1), [rule("18:00", "20:00")]
        )
        assert windows == []

    def test_split_shift(self):
        windows = resolve_working_windows(
            MONDAY,
            weekday_hours(1),
            [rule("13:00", "17:00"), rule("09:00", "12:00")],
        )
        assert windows == [window("09:00", "12:00"), window("13:00", "17:00")]

    def test_overlapping_rules_are_unioned(self):
        windows = resolve_working_windows(
            MONDAY,
            weekday_hours(1),
            [rule("09:00", "12:00"), rule("11:00", "15:00")],
        )
        assert windows == [window("09:00", "15:00")]

    def test_touching_rules_merge(self):
        windows = resolve_working_windows(
            MONDAY,
            weekday_hours(1),
            [rule("09:00", "12:00"), rule("12:00", "14:00")],
        )
        assert windows == [window("09:00", "14:00")]

    def test_rules_for_other_days_ignored(self):
        windows = resolve_working_windows(
            MONDAY, weekday_hours(1), [rule("10:00", "11:00", day=2)]
        )
        assert windows == [window("09:00", "17:00")]

    def test_malformed_rule_skipped(self):
        windows = resolve_working_windows(
            MONDAY,
            weekday_hours(1),
            [rule("bad", "12:00", rule_id=7), rule("13:00", "15:00")],
        )
        assert windows == [window("13:00", "15:00")]

    def test_malformed_business_hours_treated_as_closed(self):
        hours = [
            BusinessHoursRecord(
                store_id=1, day_of_week=1, open_time="9am", close_time="17:00"
            )
        ]
        assert resolve_working_windows(MONDAY, hours, []) == []

    def test_close_before_open_treated_as_closed(self):
        hours = [
            BusinessHoursRecord(
                store_id=1, day_of_week=1, open_time="17:00", close_time="09:00"
            )
        ]
        assert resolve_working_windows(MONDAY, hours, []) == []


class TestWorkingHoursResolver:
    @pytest.mark.asyncio
    async def test_resolve_reads_from_data_source(self):
        source = InMemoryDataSource(
            business_hours=weekday_hours(1),
            rules=[rule("10:00", "12:00", staff_id=5), rule("14:00", "16:00", staff_id=6)],
        )
        resolver = WorkingHoursResolver(source)

        assert await resolver.resolve(1, 5, MONDAY) == [window("10:00", "12:00")]
        assert await resolver.resolve(1, 6, MONDAY) == [window("14:00", "16:00")]
        assert await resolver.resolve(1, 7, MONDAY) == [window("09:00", "17:00")]
