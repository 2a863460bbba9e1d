"""Maintenance window lookups over an immutable set of windows."""

from dataclasses import dataclass
from typing import Iterable

from reservations.domain.calendar import date_ranges_overlap, touched_dates
from reservations.domain.models import MaintenanceWindow
from reservations.domain.value_objects import CategoryId, TimeInterval


@dataclass(frozen=True)
class BlockCheck:
    blocked: bool
    windows: tuple[MaintenanceWindow, ...] = ()


class MaintenanceWindowIndex:
    """Answers whether a category is closed for part of an interval."""

    def __init__(self, windows: Iterable[MaintenanceWindow]) -> None:
        self._windows = tuple(
            sorted(
                (w for w in windows if w.is_active),
                key=lambda w: (w.date_range.start, w.date_range.end, w.id),
            )
        )

    def __len__(self) -> int:
        return len(self._windows)

    def is_blocked(self, category_id: CategoryId, interval: TimeInterval) -> BlockCheck:
        """Return every active window that overlaps ``interval`` and affects the category."""
        dates = touched_dates(interval)
        matching = tuple(
            window
            for window in self._windows
            if window.affects(category_id) and date_ranges_overlap(window.date_range, dates)
        )
        return BlockCheck(blocked=bool(matching), windows=matching)
