"""
Pytest configuration and shared fixtures.
"""

from decimal import Decimal

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from django.conf import settings as django_settings

from core.domain.exceptions import NotificationError
from licenses.domain.services import LicenseGenerator
from licenses.infrastructure.signing import get_license_generator
from orders.domain.order import Order
from orders.infrastructure.locks import KeyedLock
from orders.infrastructure.repositories import get_order_repository
from orders.infrastructure.repositories.django_order_repository import DjangoOrderRepository
from orders.infrastructure.repositories.json_file_order_repository import (
    JsonFileOrderRepository,
)
from orders.ports.notifier import LicenseNotifier


class FakeNotifier(LicenseNotifier):
    """Notifier that records deliveries and can be told to fail."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.delivered = []

    async def notify(self, order: Order) -> None:
        if self.fail:
            raise NotificationError(f"SMTP unavailable for {order.id}")
        self.delivered.append(order)


class CountingGenerator(LicenseGenerator):
    """LicenseGenerator that counts signatures."""

    def __init__(self, private_key):
        super().__init__(private_key)
        self.calls = 0

    def generate(self, machine_id, license_type, now):
        self.calls += 1
        return super().generate(machine_id, license_type, now)


@pytest.fixture(autouse=True)
def _reset_cached_adapters():
    """Rebuild settings-driven adapters for every test."""
    get_order_repository.cache_clear()
    get_license_generator.cache_clear()
    yield
    get_order_repository.cache_clear()
    get_license_generator.cache_clear()


@pytest.fixture(scope="session")
def rsa_private_key():
    """Session-wide RSA key; generating one per test is slow."""
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def rsa_public_key(rsa_private_key):
    """Public half of the session key."""
    return rsa_private_key.public_key()


@pytest.fixture(scope="session")
def private_key_pem(rsa_private_key) -> str:
    """Session key as unencrypted PKCS#8 PEM."""
    return rsa_private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode()


@pytest.fixture
def license_generator(rsa_private_key):
    """Fixture for a configured LicenseGenerator that counts calls."""
    return CountingGenerator(rsa_private_key)


@pytest.fixture
def unconfigured_generator():
    """Fixture for a LicenseGenerator without a signing key."""
    return LicenseGenerator(private_key=None)


@pytest.fixture
def notifier():
    """Fixture for a recording notifier."""
    return FakeNotifier()


@pytest.fixture
def failing_notifier():
    """Fixture for a notifier whose deliveries always fail."""
    return FakeNotifier(fail=True)


@pytest.fixture
def json_repository(tmp_path):
    """Fixture for a JSON file OrderRepository in a temporary directory."""
    return JsonFileOrderRepository(tmp_path / "orders.json", locks=KeyedLock(timeout=5.0))


@pytest.fixture
def django_repository():
    """Fixture for the Django OrderRepository."""
    return DjangoOrderRepository()


@pytest.fixture
def sample_order():
    """Fixture for a pending yearly order."""
    return Order.create(
        order_id="TT1234",
        machine_id="MACHINE-0001",
        email="buyer@example.com",
        license_type="Y",
        amount=Decimal("200000"),
    )


@pytest.fixture
def signing_configured(settings, private_key_pem):
    """Configure the service-wide signing key through settings."""
    settings.LICENSE_PRIVATE_KEY = private_key_pem
    get_license_generator.cache_clear()
    return private_key_pem


@pytest.fixture
def json_store(settings, tmp_path):
    """Switch the service to the JSON file store."""
    settings.ORDER_STORE_BACKEND = "json"
    settings.ORDER_STORE_PATH = str(tmp_path / "orders.json")
    get_order_repository.cache_clear()
    return tmp_path / "orders.json"


@pytest.fixture
def api_client():
    """Fixture for DRF API client."""
    from rest_framework.test import APIClient

    return APIClient()


@pytest.fixture
def admin_headers():
    """Headers carrying the administrator key from test settings."""
    return {"HTTP_X_ADMIN_KEY": django_settings.ADMIN_API_KEY}


class RecordingHandler:
    """Event handler that keeps every event it receives."""

    def __init__(self):
        self.events = []

    async def handle(self, event):
        self.events.append(event)


@pytest.fixture
def recorded_events():
    """Record order events published on the global event bus."""
    from core.infrastructure.events import event_bus
    from orders.domain.events import OrderCreated, OrderDeleted, OrderFulfilled

    handler = RecordingHandler()
    event_types = (OrderCreated, OrderFulfilled, OrderDeleted)
    for event_type in event_types:
        event_bus.subscribe(event_type, handler)
    yield handler.events
    for event_type in event_types:
        event_bus.unsubscribe(event_type, handler)
