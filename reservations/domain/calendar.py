"""Date and interval arithmetic. All datetime intervals are half-open."""

import math
from datetime import date, datetime, time, timedelta
from typing import Iterable, TypeVar

from reservations.domain.value_objects import DateRange, TimeInterval

T = TypeVar("T", date, datetime)


def overlaps(a_start: T, a_end: T, b_start: T, b_end: T) -> bool:
    """Return True if ``[a_start, a_end)`` and ``[b_start, b_end)`` intersect."""
    return a_start < b_end and b_start < a_end


def intervals_overlap(a: TimeInterval, b: TimeInterval) -> bool:
    return overlaps(a.start, a.end, b.start, b.end)


def touched_dates(interval: TimeInterval) -> DateRange:
    """Calendar dates touched by ``interval``.

    An interval ending exactly at midnight does not touch the next day.
    """
    last = interval.end.date()
    if interval.end.time() == time(0):
        last -= timedelta(days=1)
    return DateRange(interval.start.date(), max(last, interval.start.date()))


def date_ranges_overlap(a: DateRange, b: DateRange) -> bool:
    one_day = timedelta(days=1)
    return overlaps(a.start, a.end + one_day, b.start, b.end + one_day)


def billing_days(interval: TimeInterval, unit_hours: int = 24) -> int:
    """Whole billing units covering ``interval``, rounded up, at least one."""
    if unit_hours <= 0:
        raise ValueError("Billing unit must be a positive number of hours")
    unit = timedelta(hours=unit_hours)
    return max(1, math.ceil(interval.duration / unit))


def billing_dates(interval: TimeInterval, unit_hours: int = 24) -> list[date]:
    """Calendar date on which each billing unit starts, counted from check-in."""
    unit = timedelta(hours=unit_hours)
    return [(interval.start + unit * i).date() for i in range(billing_days(interval, unit_hours))]


def peak_overlap(intervals: Iterable[TimeInterval]) -> int:
    """Maximum number of intervals in force at the same instant."""
    events: list[tuple[datetime, int]] = []
    for interval in intervals:
        events.append((interval.start, 1))
        events.append((interval.end, -1))
    # At equal instants ends (-1) sort before starts (+1): back-to-back is not overlap.
    events.sort()
    peak = current = 0
    for _, delta in events:
        current += delta
        peak = max(peak, current)
    return peak
