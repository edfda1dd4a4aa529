"""
Pytest configuration and shared fixtures.

Configures Django once for the session, and gives each test a fresh store
and service with a mocked event publisher.
"""
import os
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import django
import pytest

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "ordersvc.settings")
django.setup()

from django.apps import apps  # noqa: E402
from django.test import Client  # noqa: E402

from orders.services import OrderService  # noqa: E402
from orders.store import OrderStore  # noqa: E402
from orders.validators import CreateOrderCommand  # noqa: E402


class TickingClock:
    """Deterministic clock: every call is one second after the previous one."""

    def __init__(self, start=datetime(2024, 1, 1, tzinfo=timezone.utc)):
        self.current = start

    def __call__(self):
        self.current = self.current + timedelta(seconds=1)
        return self.current


@pytest.fixture
def clock():
    return TickingClock()


@pytest.fixture
def store(clock):
    return OrderStore(clock=clock)


@pytest.fixture
def publisher():
    return MagicMock()


@pytest.fixture
def service(store, publisher):
    return OrderService(store=store, publisher=publisher)


@pytest.fixture
def create_order(service):
    """Create an order through the service and return its result."""
    def _create(**payload):
        payload.setdefault("userId", "u1")
        payload.setdefault("amount", 100)
        return service.create_order(CreateOrderCommand.from_payload(payload))
    return _create


@pytest.fixture
def client(service):
    """Django test client wired to the per-test service."""
    config = apps.get_app_config("orders")
    previous = config.service
    config.service = service
    yield Client()
    config.service = previous
