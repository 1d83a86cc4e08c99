"""
Django implementation of OrderRepository port.

This adapter converts between domain entities and Django ORM models.
Mutations hold a process-level lock for the order id and a row lock
(``select_for_update``) inside a transaction, so concurrent workers in one
process and across processes serialize on the same order.
"""
import logging
from typing import List, Optional

from asgiref.sync import sync_to_async
from django.db import DatabaseError, IntegrityError, transaction

from core.domain.exceptions import (
    DomainException,
    OrderAlreadyExistsError,
    OrderNotFoundError,
    OrderStoreError,
    StoreCorruptionError,
)
from core.domain.value_objects import Email, LicenseType, MachineId, OrderStatus
from orders.domain.order import Order
from orders.infrastructure.locks import KeyedLock
from orders.infrastructure.models import Order as OrderModel
from orders.ports.order_repository import OrderRepository, OrderTransform

logger = logging.getLogger(__name__)


class DjangoOrderRepository(OrderRepository):
    """
    Django ORM implementation of OrderRepository.

    This adapter:
    1. Converts Django models to domain entities
    2. Converts domain entities to Django models
    3. Implements repository interface
    """

    def __init__(self, locks: Optional[KeyedLock] = None):
        """Initialize repository with an optional shared lock registry."""
        self._locks = locks or KeyedLock()

    def _to_domain(self, model: OrderModel) -> Order:
        """
        Convert Django model to domain entity.

        Args:
            model: Django Order model

        Returns:
            Order domain entity

        Raises:
            StoreCorruptionError: If the row violates the order invariants
        """
        try:
            return Order(
                id=model.id,
                machine_id=MachineId(model.machine_id),
                email=Email(model.email),
                license_type=LicenseType(model.license_type),
                amount=model.amount,
                status=OrderStatus(model.status),
                license_key=model.license_key,
                created_at=model.created_at,
                updated_at=model.updated_at,
                notified_at=model.notified_at,
            )
        except (ValueError, DomainException) as exc:
            logger.error("Unreadable order row %s: %s", model.id, exc)
            raise StoreCorruptionError(f"Order {model.id} cannot be read: {exc}") from exc

    def _apply(self, model: OrderModel, order: Order) -> OrderModel:
        """
        Copy domain entity fields onto a Django model.

        Args:
            model: Django Order model
            order: Order domain entity

        Returns:
            Updated Django model
        """
        model.machine_id = str(order.machine_id)
        model.email = str(order.email)
        model.license_type = order.license_type.value
        model.amount = order.amount
        model.status = order.status.value
        model.license_key = order.license_key
        model.notified_at = order.notified_at
        model.created_at = order.created_at
        model.updated_at = order.updated_at
        return model

    @sync_to_async
    def create(self, order: Order) -> Order:
        """
        Persist a new order.

        Args:
            order: Order entity to create

        Returns:
            Created order entity
        """
        with self._locks.hold(order.id):
            try:
                with transaction.atomic():
                    # pylint: disable=no-member
                    if OrderModel.objects.filter(id=order.id).exists():
                        raise OrderAlreadyExistsError(f"Order {order.id} already exists")
                    model = self._apply(OrderModel(id=order.id), order)
                    model.save(force_insert=True)
            except IntegrityError as exc:
                raise OrderAlreadyExistsError(f"Order {order.id} already exists") from exc
            except DatabaseError as exc:
                logger.error("Failed to create order %s: %s", order.id, exc, exc_info=True)
                raise OrderStoreError(f"Could not create order {order.id}") from exc
        return self._to_domain(model)

    @sync_to_async
    def get(self, order_id: str) -> Order:
        """
        Get an order by id.

        Args:
            order_id: Order id

        Returns:
            Order entity
        """
        try:
            # pylint: disable=no-member
            model = OrderModel.objects.get(id=order_id)
        except OrderModel.DoesNotExist as exc:  # pylint: disable=no-member
            raise OrderNotFoundError(f"Order {order_id} not found") from exc
        except DatabaseError as exc:
            logger.error("Failed to read order %s: %s", order_id, exc, exc_info=True)
            raise OrderStoreError(f"Could not read order {order_id}") from exc
        return self._to_domain(model)

    @sync_to_async
    def mutate(self, order_id: str, transform: OrderTransform) -> Order:
        """
        Read-modify-write one order under its exclusive lock.

        Args:
            order_id: Order id
            transform: Function from the current order to the new order

        Returns:
            Order entity as stored after the call
        """
        with self._locks.hold(order_id):
            try:
                with transaction.atomic():
                    try:
                        # pylint: disable=no-member
                        model = OrderModel.objects.select_for_update().get(id=order_id)
                    except OrderModel.DoesNotExist as exc:  # pylint: disable=no-member
                        raise OrderNotFoundError(f"Order {order_id} not found") from exc

                    current = self._to_domain(model)
                    updated = transform(current)
                    if updated is current:
                        return current

                    self._apply(model, updated)
                    model.save()
            except DatabaseError as exc:
                logger.error(
                    "Failed to update order %s: %s",
                    order_id,
                    exc,
                    extra={"order_id": order_id, "operation": "mutate"},
                    exc_info=True,
                )
                raise OrderStoreError(f"Could not update order {order_id}") from exc
        return updated

    @sync_to_async
    def delete(self, order_id: str) -> bool:
        """
        Delete an order.

        Args:
            order_id: Order id

        Returns:
            True if the order existed, False otherwise
        """
        with self._locks.hold(order_id):
            try:
                # pylint: disable=no-member
                deleted, _ = OrderModel.objects.filter(id=order_id).delete()
            except DatabaseError as exc:
                logger.error("Failed to delete order %s: %s", order_id, exc, exc_info=True)
                raise OrderStoreError(f"Could not delete order {order_id}") from exc
        return deleted > 0

    @sync_to_async
    def list(self) -> List[Order]:
        """
        List all orders, newest first.

        Returns:
            List of Order entities
        """
        try:
            # pylint: disable=no-member
            models = list(OrderModel.objects.order_by("-created_at"))
        except DatabaseError as exc:
            logger.error("Failed to list orders: %s", exc, exc_info=True)
            raise OrderStoreError("Could not list orders") from exc
        return [self._to_domain(model) for model in models]

    @sync_to_async
    def count(self) -> int:
        """
        Count stored orders.

        Returns:
            Number of orders
        """
        try:
            # pylint: disable=no-member
            return OrderModel.objects.count()
        except DatabaseError as exc:
            logger.error("Failed to count orders: %s", exc, exc_info=True)
            raise OrderStoreError("Could not count orders") from exc
