from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, TypeVar

T = TypeVar("T")


@dataclass(frozen=True, order=True)
class TimeInterval:
    """Half-open span of time ``[start, end)``."""

    start: datetime
    end: datetime

    def overlaps(self, start: datetime, end: datetime) -> bool:
        return start < self.end and end > self.start

    def contains(self, start: datetime, end: datetime) -> bool:
        return self.start <= start and end <= self.end


def merge_spans(spans: Iterable[tuple[T, T]]) -> list[tuple[T, T]]:
    """Sort spans and merge the ones that overlap or touch.

    Empty or inverted spans are dropped.
    """
    merged: list[tuple[T, T]] = []
    for start, end in sorted(s for s in spans if s[0] < s[1]):
        if merged and start <= merged[-1][1]:
            if end > merged[-1][1]:
                merged[-1] = (merged[-1][0], end)
        else:
            merged.append((start, end))
    return merged


def merge_intervals(intervals: Iterable[TimeInterval]) -> list[TimeInterval]:
    return [
        TimeInterval(start, end)
        for start, end in merge_spans((i.start, i.end) for i in intervals)
    ]
