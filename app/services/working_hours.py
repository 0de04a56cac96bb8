from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Iterable, Optional, Sequence

import structlog

from app.repositories.availability import AvailabilityDataSource
from app.schemas.records import BusinessHoursRecord, StaffAvailabilityRuleRecord
from app.services.intervals import merge_spans
from app.services.timezone import day_of_week

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class LocalWindow:
    """Store-local wall-clock span in which a staff member can be booked."""

    start: datetime
    end: datetime


def parse_hhmm(value: str) -> int:
    """Parse ``"HH:MM"`` into minutes after midnight."""
    try:
        hours, minutes = value.split(":")
        hours, minutes = int(hours), int(minutes)
    except (AttributeError, ValueError) as e:
        raise ValueError(f"Invalid time {value!r}, expected HH:MM") from e
    if not (0 <= hours <= 23 and 0 <= minutes <= 59):
        raise ValueError(f"Invalid time {value!r}, expected HH:MM")
    return hours * 60 + minutes


def _store_window(
    local_date: date, business_hours: Iterable[BusinessHoursRecord]
) -> Optional[tuple[int, int]]:
    weekday = day_of_week(local_date)
    day_hours = next((h for h in business_hours if h.day_of_week == weekday), None)

    if day_hours is None:
        logger.info("No business hours configured", weekday=weekday, date=str(local_date))
        return None
    if day_hours.is_closed:
        return None

    try:
        open_minute = parse_hhmm(day_hours.open_time)
        close_minute = parse_hhmm(day_hours.close_time)
    except ValueError as e:
        logger.warning(
            "Malformed business hours, treating day as closed",
            store_id=day_hours.store_id,
            weekday=weekday,
            error=str(e),
        )
        return None

    if close_minute <= open_minute:
        return None
    return open_minute, close_minute


def resolve_working_windows(
    local_date: date,
    business_hours: Sequence[BusinessHoursRecord],
    staff_rules: Sequence[StaffAvailabilityRuleRecord],
) -> list[LocalWindow]:
    """Effective working windows for one staff member on one local date.

    A staff member without rules for the weekday follows the store hours.
    Otherwise each rule is clipped to the store hours and the clipped rules
    are unioned, so overlapping rules never shrink availability.
    """
    store_window = _store_window(local_date, business_hours)
    if store_window is None:
        return []
    open_minute, close_minute = store_window

    weekday = day_of_week(local_date)
    day_rules = [r for r in staff_rules if r.day_of_week == weekday]

    if not day_rules:
        spans = [store_window]
    else:
        spans = []
        for rule in day_rules:
            try:
                start = parse_hhmm(rule.start_time)
                end = parse_hhmm(rule.end_time)
            except ValueError as e:
                logger.warning(
                    "Skipping malformed staff availability rule",
                    staff_id=rule.staff_id,
                    rule_id=rule.id,
                    error=str(e),
                )
                continue
            spans.append((max(start, open_minute), min(end, close_minute)))

    midnight = datetime.combine(local_date, time.min)
    return [
        LocalWindow(
            start=midnight + timedelta(minutes=start),
            end=midnight + timedelta(minutes=end),
        )
        for start, end in merge_spans(spans)
    ]


class WorkingHoursResolver:
    """Loads store hours and staff rules and resolves working windows."""

    def __init__(self, data_source: AvailabilityDataSource):
        self.data_source = data_source

    async def resolve(
        self, store_id: int, staff_id: int, local_date: date
    ) -> list[LocalWindow]:
        business_hours = await self.data_source.get_business_hours(store_id)
        staff_rules = await self.data_source.get_staff_availability_rules(staff_id)

        windows = resolve_working_windows(local_date, business_hours, staff_rules)
        logger.debug(
            "Resolved working windows",
            store_id=store_id,
            staff_id=staff_id,
            date=str(local_date),
            windows=[(w.start.time().isoformat(), w.end.time().isoformat()) for w in windows],
        )
        return windows
