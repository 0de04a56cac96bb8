from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from app.services.timezone import (
    day_of_week,
    ensure_utc,
    get_timezone_abbr,
    get_zone,
    is_valid_timezone,
    local_day_bounds_utc,
    store_local_to_utc,
    to_iso_utc,
    to_local_datetime,
    to_store_local,
)
from tests.fixtures.salon_fixtures import utc

NEW_YORK = "America/New_York"


class TestZoneLookup:
    def test_known_zone(self):
        assert get_zone(NEW_YORK) == ZoneInfo(NEW_YORK)

    def test_unknown_zone_raises(self):
        with pytest.raises(ValueError):
            get_zone("Mars/Olympus_Mons")

    @pytest.mark.parametrize(
        "name,expected",
        [(NEW_YORK, True), ("UTC", True), ("Not/AZone", False), ("", False), (None, False)],
    )
    def test_is_valid_timezone(self, name, expected):
        assert is_valid_timezone(name) is expected


class TestDayOfWeek:
    def test_sunday_is_zero(self):
        assert day_of_week(date(2024, 1, 14)) == 0

    def test_monday_is_one(self):
        assert day_of_week(date(2024, 1, 15)) == 1

    def test_saturday_is_six(self):
        assert day_of_week(date(2024, 1, 20)) == 6


class TestEnsureUtc:
    def test_naive_value_is_read_as_utc(self):
        assert ensure_utc(datetime(2024, 1, 15, 14, 0)) == utc(2024, 1, 15, 14, 0)

    def test_aware_value_is_converted(self):
        local = datetime(2024, 1, 15, 9, 0, tzinfo=ZoneInfo(NEW_YORK))
        converted = ensure_utc(local)
        assert converted == utc(2024, 1, 15, 14, 0)
        assert converted.utcoffset() == timedelta(0)


class TestToStoreLocal:
    def test_winter_offset(self):
        parts = to_store_local(utc(2024, 1, 15, 14, 0), NEW_YORK)
        assert (parts.year, parts.month, parts.day) == (2024, 1, 15)
        assert (parts.hour, parts.minute) == (9, 0)
        assert parts.day_of_week == 1
        assert parts.minute_of_day == 540

    def test_summer_offset(self):
        parts = to_store_local(utc(2024, 7, 15, 13, 0), NEW_YORK)
        assert (parts.hour, parts.minute) == (9, 0)

    def test_local_date_differs_from_utc_date(self):
        parts = to_store_local(utc(2024, 1, 16, 3, 0), NEW_YORK)
        assert parts.date == date(2024, 1, 15)
        assert parts.hour == 22

    def test_naive_input_is_read_as_utc(self):
        parts = to_store_local(datetime(2024, 1, 15, 14, 0), NEW_YORK)
        assert parts.hour == 9

    def test_unknown_zone_raises(self):
        with pytest.raises(ValueError):
            to_store_local(utc(2024, 1, 15, 14, 0), "Bogus/Zone")

    def test_to_local_datetime_is_naive(self):
        local = to_local_datetime(utc(2024, 1, 15, 14, 0), NEW_YORK)
        assert local == datetime(2024, 1, 15, 9, 0)
        assert local.tzinfo is None


class TestStoreLocalToUtc:
    def test_string_input(self):
        assert store_local_to_utc("2024-01-15T09:00", NEW_YORK) == utc(2024, 1, 15, 14, 0)

    def test_naive_datetime_input(self):
        result = store_local_to_utc(datetime(2024, 7, 15, 9, 0), NEW_YORK)
        assert result == utc(2024, 7, 15, 13, 0)

    def test_round_trip(self):
        local = datetime(2024, 5, 20, 16, 45)
        instant = store_local_to_utc(local, NEW_YORK)
        assert to_local_datetime(instant, NEW_YORK) == local

    def test_spring_forward_gap_moves_forward(self):
        # 02:30 does not exist on 2024-03-10 in New York
        instant = store_local_to_utc(datetime(2024, 3, 10, 2, 30), NEW_YORK)
        assert instant == utc(2024, 3, 10, 7, 30)
        assert to_local_datetime(instant, NEW_YORK) == datetime(2024, 3, 10, 3, 30)

    def test_fall_back_repeated_time_uses_first_occurrence(self):
        instant = store_local_to_utc(datetime(2024, 11, 3, 1, 30), NEW_YORK)
        assert instant == utc(2024, 11, 3, 5, 30)

    def test_offset_aware_input_rejected(self):
        with pytest.raises(ValueError):
            store_local_to_utc(utc(2024, 1, 15, 9, 0), NEW_YORK)

    def test_malformed_string_rejected(self):
        with pytest.raises(ValueError):
            store_local_to_utc("15/01/2024 09:00", NEW_YORK)


class TestLocalDayBounds:
    def test_regular_day(self):
        start, end = local_day_bounds_utc(date(2024, 1, 15), NEW_YORK)
        assert start == utc(2024, 1, 15, 5, 0)
        assert end == utc(2024, 1, 16, 5, 0)

    def test_spring_forward_day_is_23_hours(self):
        start, end = local_day_bounds_utc(date(2024, 3, 10), NEW_YORK)
        assert end - start == timedelta(hours=23)

    def test_fall_back_day_is_25_hours(self):
        start, end = local_day_bounds_utc(date(2024, 11, 3), NEW_YORK)
        assert end - start == timedelta(hours=25)


class TestFormatting:
    def test_iso_utc_has_millis_and_z(self):
        assert to_iso_utc(utc(2024, 1, 15, 14, 0)) == "2024-01-15T14:00:00.000Z"

    def test_iso_utc_converts_aware_values(self):
        local = datetime(2024, 1, 15, 9, 0, tzinfo=ZoneInfo(NEW_YORK))
        assert to_iso_utc(local) == "2024-01-15T14:00:00.000Z"

    def test_timezone_abbr_follows_dst(self):
        assert get_timezone_abbr(NEW_YORK, at=utc(2024, 1, 15)) == "EST"
        assert get_timezone_abbr(NEW_YORK, at=utc(2024, 7, 15)) == "EDT"

    def test_timezone_abbr_falls_back_to_name(self):
        assert get_timezone_abbr("Not/AZone") == "Not/AZone"
