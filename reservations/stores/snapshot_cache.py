"""Version-stamped reference snapshots held in the Django cache.

Every administrative write to maintenance windows or special prices bumps
the version (see reservations/signals.py), so the next read reloads.
"""

from dataclasses import replace

from django.core.cache import cache

from reservations.domain import ReferenceSnapshot
from reservations.stores.interfaces import ReservationStore

VERSION_KEY = "reservations:snapshot:version"


def snapshot_key(version: int) -> str:
    return f"reservations:snapshot:v{version}"


def current_version() -> int:
    cache.add(VERSION_KEY, 1, timeout=None)
    return cache.get(VERSION_KEY, 1)


def invalidate_snapshot() -> int:
    """Retire the current snapshot and return the new version."""
    old = current_version()
    try:
        new = cache.incr(VERSION_KEY)
    except ValueError:
        new = old + 1
        cache.set(VERSION_KEY, new, timeout=None)
    cache.delete(snapshot_key(old))
    return new


class CachedSnapshotSource:
    """Callable returning the current ReferenceSnapshot, loading it on a miss."""

    def __init__(self, store: ReservationStore, timeout: int = 300) -> None:
        self._store = store
        self._timeout = timeout

    def __call__(self) -> ReferenceSnapshot:
        version = current_version()
        key = snapshot_key(version)
        snapshot = cache.get(key)
        if snapshot is None:
            snapshot = replace(self._store.load_reference_snapshot(), version=version)
            cache.set(key, snapshot, self._timeout)
        return snapshot
