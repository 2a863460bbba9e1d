"""Tests for cache behavior.

Run with: pytest tests/test_cache.py -v
"""

from datetime import date
from decimal import Decimal

import pytest
from django.core.cache import cache

from reservations import models
from reservations.stores.django_store import DjangoReservationStore
from reservations.stores.snapshot_cache import (
    CachedSnapshotSource,
    current_version,
    invalidate_snapshot,
    snapshot_key,
)


@pytest.fixture
def parking_category():
    return models.ParkingCategory.objects.create(
        code="INDOOR", name="Indoor", total_capacity=10, base_price_per_day=Decimal("500")
    )


def create_window(**kwargs):
    values = {"start_date": date(2025, 3, 12), "end_date": date(2025, 3, 12), "reason": "Resurfacing"}
    values.update(kwargs)
    return models.MaintenanceWindow.objects.create(**values)


class TestSnapshotVersion:
    def test_version_starts_at_one(self):
        assert current_version() == 1

    def test_invalidate_bumps_version_and_drops_snapshot(self):
        cache.set(snapshot_key(1), "stale")

        assert invalidate_snapshot() == 2
        assert cache.get(snapshot_key(1)) is None
        assert current_version() == 2


@pytest.mark.django_db
class TestCachedSnapshotSource:
    def test_snapshot_is_cached_under_current_version(self, parking_category):
        create_window()
        source = CachedSnapshotSource(DjangoReservationStore())

        first = source()

        assert first.version == current_version()
        assert cache.get(snapshot_key(first.version)) == first
        assert source() == first
        assert len(first.maintenance_windows) == 1

    def test_cached_snapshot_is_served_without_reloading(self, parking_category):
        store = DjangoReservationStore()
        source = CachedSnapshotSource(store)
        source()

        models.SpecialPrice.objects.bulk_create(
            [
                models.SpecialPrice(
                    category=parking_category,
                    start_date=date(2025, 3, 12),
                    end_date=date(2025, 3, 12),
                    price=Decimal("800"),
                )
            ]
        )

        # bulk_create sends no signals, so the cached copy is still current.
        assert source().price_overrides == ()


@pytest.mark.django_db
class TestCacheInvalidation:
    """Tests for snapshot invalidation on model changes."""

    def test_window_save_invalidates_snapshot(self, parking_category):
        source = CachedSnapshotSource(DjangoReservationStore())
        before = source()

        create_window()
        after = source()

        assert after.version > before.version
        assert len(after.maintenance_windows) == 1

    def test_window_delete_invalidates_snapshot(self, parking_category):
        window = create_window()
        source = CachedSnapshotSource(DjangoReservationStore())
        assert len(source().maintenance_windows) == 1

        window.delete()

        assert source().maintenance_windows == ()

    def test_affected_categories_change_invalidates_snapshot(self, parking_category):
        window = create_window()
        source = CachedSnapshotSource(DjangoReservationStore())
        version = source().version

        window.affected_categories.add(parking_category)
        snapshot = source()

        assert snapshot.version > version
        assert len(snapshot.maintenance_windows[0].affected_category_ids) == 1

    def test_special_price_save_invalidates_snapshot(self, parking_category):
        source = CachedSnapshotSource(DjangoReservationStore())
        source()

        models.SpecialPrice.objects.create(
            category=parking_category,
            start_date=date(2025, 3, 12),
            end_date=date(2025, 3, 12),
            price=Decimal("800"),
            reason="Holiday",
        )

        assert [o.reason for o in source().price_overrides] == ["Holiday"]

    def test_invalidation_repeats_on_commit(self, parking_category, django_capture_on_commit_callbacks):
        with django_capture_on_commit_callbacks(execute=True) as callbacks:
            create_window()
            version = current_version()

        assert len(callbacks) == 1
        assert current_version() == version + 1
