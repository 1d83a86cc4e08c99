"""
Integration tests for fulfilling one order from many threads.

Each worker drives the service through ``async_to_sync`` on its own thread,
so ORM work runs on separate database connections as it does under a
threaded server.
"""

import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from decimal import Decimal

import pytest
from asgiref.sync import async_to_sync
from django.db import connections

from orders.application.services.fulfillment import OrderFulfillmentService
from orders.infrastructure.locks import KeyedLock
from orders.infrastructure.models import Order as OrderModel
from orders.infrastructure.repositories.django_order_repository import DjangoOrderRepository

WORKERS = 8
NOW = datetime(2024, 1, 15, 9, 0, tzinfo=timezone.utc)


@pytest.mark.django_db(transaction=True)
@pytest.mark.integration
class TestConcurrentFulfillment:
    """Integration tests for racing fulfills against the Django store."""

    def test_threads_sign_once(self, license_generator, notifier):
        """Test racing threads produce one key, one commit and one delivery."""
        OrderModel.objects.create(
            id="TT1234",
            machine_id="MACHINE-0001",
            email="buyer@example.com",
            license_type="Y",
            amount=Decimal("200000"),
            status="PENDING",
        )
        service = OrderFulfillmentService(
            order_repository=DjangoOrderRepository(locks=KeyedLock(timeout=10.0)),
            license_generator=license_generator,
            notifier=notifier,
            clock=lambda: NOW,
        )
        barrier = threading.Barrier(WORKERS)

        def fulfill():
            try:
                barrier.wait(timeout=5)
                return async_to_sync(service.fulfill)("TT1234", trigger="admin")
            finally:
                connections.close_all()

        with ThreadPoolExecutor(max_workers=WORKERS) as pool:
            results = list(pool.map(lambda _: fulfill(), range(WORKERS)))

        assert len({result.license_key for result in results}) == 1
        assert [result.already_completed for result in results].count(False) == 1
        assert all(result.fulfilled for result in results)
        assert license_generator.calls == 1
        assert len(notifier.delivered) == 1

        stored = OrderModel.objects.get(id="TT1234")
        assert stored.status == "COMPLETED"
        assert stored.license_key == results[0].license_key
