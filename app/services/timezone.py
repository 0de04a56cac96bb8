"""Conversions between UTC instants and store-local wall-clock time.

All offset arithmetic in the application goes through this module. Stored
instants are timezone-aware UTC datetimes; store-local values are naive
datetimes read as wall-clock time in the store's IANA zone.
"""

from datetime import date, datetime, time, timedelta, timezone
from functools import lru_cache
from typing import NamedTuple, Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


class LocalDateTimeParts(NamedTuple):
    year: int
    month: int
    day: int
    hour: int
    minute: int
    second: int
    day_of_week: int  # 0 = Sunday

    @property
    def date(self) -> date:
        return date(self.year, self.month, self.day)

    @property
    def minute_of_day(self) -> int:
        return self.hour * 60 + self.minute


@lru_cache(maxsize=64)
def get_zone(timezone_name: str) -> ZoneInfo:
    """Return the IANA zone, raising ``ValueError`` for unknown names."""
    if not timezone_name:
        raise ValueError("Timezone name is empty")
    try:
        return ZoneInfo(timezone_name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError(f"Unknown timezone: {timezone_name}") from e


def is_valid_timezone(timezone_name: Optional[str]) -> bool:
    try:
        get_zone(timezone_name)
    except (ValueError, TypeError):
        return False
    return True


def day_of_week(local_date: date) -> int:
    """Weekday with Sunday as 0, the convention used by stored schedules."""
    return (local_date.weekday() + 1) % 7


def ensure_utc(instant: datetime) -> datetime:
    """Normalise to an aware UTC datetime; naive input is read as UTC."""
    if instant.tzinfo is None:
        return instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(timezone.utc)


def to_store_local(utc_instant: datetime, timezone_name: str) -> LocalDateTimeParts:
    """Wall-clock parts an observer in ``timezone_name`` sees at ``utc_instant``.

    Naive input is read as UTC.
    """
    local = ensure_utc(utc_instant).astimezone(get_zone(timezone_name))
    return LocalDateTimeParts(
        year=local.year,
        month=local.month,
        day=local.day,
        hour=local.hour,
        minute=local.minute,
        second=local.second,
        day_of_week=day_of_week(local.date()),
    )


def to_local_datetime(utc_instant: datetime, timezone_name: str) -> datetime:
    """Naive store-local wall-clock datetime for a UTC instant."""
    local = ensure_utc(utc_instant).astimezone(get_zone(timezone_name))
    return local.replace(tzinfo=None)


def store_local_to_utc(
    local_value: Union[str, datetime], timezone_name: str
) -> datetime:
    """Resolve a store-local wall-clock time to a UTC instant.

    Accepts ``"YYYY-MM-DDTHH:MM[:SS]"`` or a naive datetime. A repeated local
    time (autumn fall-back) resolves to its first occurrence. A local time
    inside a spring-forward gap is pushed forward by the length of the gap,
    e.g. 02:30 on a New York spring-forward day becomes 03:30 EDT.
    """
    if isinstance(local_value, str):
        try:
            naive = datetime.fromisoformat(local_value)
        except ValueError as e:
            raise ValueError(f"Invalid local datetime: {local_value!r}") from e
    else:
        naive = local_value

    if naive.tzinfo is not None:
        raise ValueError("Local datetime must not carry a UTC offset")

    # fold=0 picks the pre-transition offset: earlier instant for repeated
    # times, forward shift for skipped times
    zoned = naive.replace(tzinfo=get_zone(timezone_name), fold=0)
    return zoned.astimezone(timezone.utc)


def local_day_bounds_utc(local_date: date, timezone_name: str) -> tuple[datetime, datetime]:
    """UTC instants at which the store-local calendar day starts and ends.

    The end bound is exclusive (start of the following local day).
    """
    start = store_local_to_utc(datetime.combine(local_date, time.min), timezone_name)
    end = store_local_to_utc(
        datetime.combine(local_date + timedelta(days=1), time.min), timezone_name
    )
    return start, end


def get_timezone_abbr(timezone_name: str, at: Optional[datetime] = None) -> str:
    """Short display label such as ``"EST"``; falls back to the zone name."""
    try:
        zone = get_zone(timezone_name)
    except ValueError:
        return timezone_name
    instant = ensure_utc(at) if at else datetime.now(timezone.utc)
    return instant.astimezone(zone).tzname() or timezone_name


def to_iso_utc(instant: datetime) -> str:
    """ISO-8601 UTC string with millisecond precision and a ``Z`` suffix."""
    utc = ensure_utc(instant)
    return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"
