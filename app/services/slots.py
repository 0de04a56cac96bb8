from datetime import datetime, timedelta
from typing import Optional, Sequence

from app.services.intervals import TimeInterval
from app.services.timezone import store_local_to_utc
from app.services.working_hours import LocalWindow


def generate_slot_starts(
    windows: Sequence[LocalWindow],
    busy: Sequence[TimeInterval],
    duration_minutes: int,
    granularity_minutes: int,
    timezone_name: str,
    not_before: Optional[datetime] = None,
) -> list[datetime]:
    """Bookable start instants (UTC) inside the working windows.

    Candidates start at each window's opening time and advance by
    ``granularity_minutes``. A candidate is kept when
    ``[candidate, candidate + duration]`` fits inside the window, overlaps no
    busy interval and does not start before ``not_before``. Window bounds
    are resolved to UTC first, so a candidate can never land in a skipped
    local hour on a spring-forward day.
    """
    if duration_minutes <= 0:
        return []
    if granularity_minutes <= 0:
        raise ValueError("granularity_minutes must be positive")

    duration = timedelta(minutes=duration_minutes)
    step = timedelta(minutes=granularity_minutes)
    starts: list[datetime] = []

    for window in sorted(windows, key=lambda w: w.start):
        window_start = store_local_to_utc(window.start, timezone_name)
        window_end = store_local_to_utc(window.end, timezone_name)

        candidate = window_start
        while candidate + duration <= window_end:
            candidate_end = candidate + duration
            if not_before is not None and candidate < not_before:
                candidate += step
                continue
            if not any(b.overlaps(candidate, candidate_end) for b in busy):
                starts.append(candidate)
            candidate += step

    return starts
