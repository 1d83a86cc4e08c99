"""
Integration tests for the Django order repository.

Repository coroutines are driven through ``async_to_sync`` so ORM work runs
on the test thread, inside the test transaction.
"""

from datetime import datetime, timezone
from decimal import Decimal

import pytest
from asgiref.sync import async_to_sync

from core.domain.exceptions import OrderAlreadyExistsError, OrderNotFoundError
from orders.domain.order import Order
from orders.infrastructure.models import Order as OrderModel


def make_order(order_id: str, created_at: datetime) -> Order:
    return Order.create(
        order_id=order_id,
        machine_id="MACHINE-0001",
        email="buyer@example.com",
        license_type="M",
        amount=Decimal("50000.50"),
        now=created_at,
    )


@pytest.mark.django_db
@pytest.mark.integration
class TestDjangoOrderRepository:
    """Integration tests for DjangoOrderRepository."""

    def test_create_and_get(self, django_repository, sample_order):
        """Test saving and reading back an order."""
        async_to_sync(django_repository.create)(sample_order)

        found = async_to_sync(django_repository.get)("TT1234")

        assert found.id == "TT1234"
        assert str(found.machine_id) == "MACHINE-0001"
        assert str(found.email) == "buyer@example.com"
        assert found.license_type.value == "Y"
        assert found.amount == Decimal("200000")
        assert found.is_completed is False
        assert found.license_key is None

    def test_create_duplicate(self, django_repository, sample_order):
        """Test creating an existing id fails without touching the row."""
        async_to_sync(django_repository.create)(sample_order)

        with pytest.raises(OrderAlreadyExistsError):
            async_to_sync(django_repository.create)(sample_order)
        assert OrderModel.objects.count() == 1

    def test_get_missing(self, django_repository):
        """Test reading an unknown id."""
        with pytest.raises(OrderNotFoundError):
            async_to_sync(django_repository.get)("TT0000")

    def test_mutate_persists_completion(self, django_repository, sample_order):
        """Test a transform's result is written."""
        async_to_sync(django_repository.create)(sample_order)

        updated = async_to_sync(django_repository.mutate)(
            "TT1234", lambda order: order.complete("Y-MACHINE--20250115-abc")
        )

        assert updated.is_completed is True
        row = OrderModel.objects.get(id="TT1234")
        assert row.status == "COMPLETED"
        assert row.license_key == "Y-MACHINE--20250115-abc"

    def test_mutate_without_change(self, django_repository, sample_order):
        """Test returning the current order leaves the row alone."""
        async_to_sync(django_repository.create)(sample_order)
        before = OrderModel.objects.get(id="TT1234").updated_at

        current = async_to_sync(django_repository.mutate)("TT1234", lambda order: order)

        assert current.is_completed is False
        assert OrderModel.objects.get(id="TT1234").updated_at == before

    def test_mutate_missing(self, django_repository):
        """Test mutating an unknown id."""
        with pytest.raises(OrderNotFoundError):
            async_to_sync(django_repository.mutate)("TT0000", lambda order: order)

    def test_delete(self, django_repository, sample_order):
        """Test deleting reports whether a row was removed."""
        async_to_sync(django_repository.create)(sample_order)

        assert async_to_sync(django_repository.delete)("TT1234") is True
        assert async_to_sync(django_repository.delete)("TT1234") is False
        assert async_to_sync(django_repository.count)() == 0

    def test_list_newest_first(self, django_repository):
        """Test listing orders by creation time, newest first."""
        async_to_sync(django_repository.create)(
            make_order("TT1001", datetime(2024, 1, 1, tzinfo=timezone.utc))
        )
        async_to_sync(django_repository.create)(
            make_order("TT1003", datetime(2024, 3, 1, tzinfo=timezone.utc))
        )
        async_to_sync(django_repository.create)(
            make_order("TT1002", datetime(2024, 2, 1, tzinfo=timezone.utc))
        )

        orders = async_to_sync(django_repository.list)()

        assert [order.id for order in orders] == ["TT1003", "TT1002", "TT1001"]
        assert orders[0].amount == Decimal("50000.50")
        assert async_to_sync(django_repository.count)() == 3
