"""Pytest configuration and shared fixtures."""

import pytest
from rest_framework.test import APIClient

from reservations.services import ReservationService
from reservations.stores.memory_store import InMemoryReservationStore
from tests.helpers import NOW, make_category


@pytest.fixture
def api_client() -> APIClient:
    return APIClient()


@pytest.fixture(autouse=True)
def clear_cache():
    from django.core.cache import cache
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def category():
    return make_category(capacity=2)


@pytest.fixture
def store(category) -> InMemoryReservationStore:
    store = InMemoryReservationStore()
    store.add_category(category)
    return store


@pytest.fixture
def service(store) -> ReservationService:
    return ReservationService(store, clock=lambda: NOW)
