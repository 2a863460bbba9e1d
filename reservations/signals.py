"""Django signals for cache invalidation.

Reference snapshots are retired as soon as a maintenance window or special
price changes, and again once the surrounding transaction commits.
"""

from django.db import transaction
from django.db.models.signals import m2m_changed, post_delete, post_save
from django.dispatch import receiver

from reservations.models import MaintenanceWindow, SpecialPrice
from reservations.stores.snapshot_cache import invalidate_snapshot


def _invalidate() -> None:
    invalidate_snapshot()
    transaction.on_commit(invalidate_snapshot)


@receiver([post_save, post_delete], sender=MaintenanceWindow)
def invalidate_maintenance_cache(sender, instance, **kwargs):
    """Invalidate snapshots when a maintenance window is saved or deleted."""
    _invalidate()


@receiver(m2m_changed, sender=MaintenanceWindow.affected_categories.through)
def invalidate_maintenance_scope_cache(sender, instance, action, **kwargs):
    """Invalidate snapshots when a window's affected categories change."""
    if action in {"post_add", "post_remove", "post_clear"}:
        _invalidate()


@receiver([post_save, post_delete], sender=SpecialPrice)
def invalidate_special_price_cache(sender, instance, **kwargs):
    """Invalidate snapshots when a special price is saved or deleted."""
    _invalidate()
