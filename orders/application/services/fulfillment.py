"""
Order fulfillment service.

Shared by the payment webhook and the administrator approval: both end in
``fulfill``, which moves an order to COMPLETED exactly once and delivers the
license key afterwards.
"""

import logging
import time
from typing import Callable, List, Optional

from django.utils import timezone

from core.domain.exceptions import (
    NotificationError,
    OrderLockTimeoutError,
    OrderNotCompletedError,
    OrderNotFoundError,
    OrderStoreError,
)
from core.infrastructure.events import event_bus
from core.instrumentation import Status, StatusCode, get_tracer
from core.metrics import (
    fulfillment_duration_seconds,
    license_notifications_total,
    orders_fulfilled_total,
)
from licenses.domain.license_key import LicenseKey
from licenses.domain.services import LicenseGenerator
from orders.application.dto.order_dto import FulfillmentResultDTO
from orders.domain.events import OrderFulfilled
from orders.domain.order import Order
from orders.ports.notifier import LicenseNotifier
from orders.ports.order_repository import OrderRepository

logger = logging.getLogger(__name__)
tracer = get_tracer(__name__)


class OrderFulfillmentService:
    """Application service that completes orders and delivers their keys."""

    def __init__(
        self,
        order_repository: OrderRepository,
        license_generator: LicenseGenerator,
        notifier: LicenseNotifier,
        clock: Optional[Callable] = None,
    ):
        """
        Initialize service.

        Args:
            order_repository: Order store
            license_generator: Signs new license keys
            notifier: Delivers license keys to buyers
            clock: Returns the current aware datetime; expiry dates are taken
                from its calendar date (defaults to local time)
        """
        self.order_repository = order_repository
        self.license_generator = license_generator
        self.notifier = notifier
        self._clock = clock or timezone.localtime

    async def fulfill(self, order_id: str, trigger: str = "admin") -> FulfillmentResultDTO:
        """
        Complete an order and deliver its license key.

        Calling this again for a completed order returns the stored key and
        neither signs nor notifies.

        Args:
            order_id: Order id
            trigger: Entry point, recorded in metrics and events

        Returns:
            FulfillmentResultDTO

        Raises:
            OrderNotFoundError: If the order does not exist
            ConfigurationError: If no signing key is configured
            OrderStoreError: If the order could not be persisted
            OrderLockTimeoutError: If the order stayed busy too long
        """
        with tracer.start_as_current_span("fulfill_order") as span:
            span.set_attribute("order.id", order_id)
            span.set_attribute("fulfillment.trigger", trigger)
            started = time.perf_counter()

            current = await self.order_repository.get(order_id)
            if current.is_completed:
                span.set_attribute("fulfillment.already_completed", True)
                span.set_status(Status(StatusCode.OK))
                return self._replay(current)

            issued: List[LicenseKey] = []

            def complete(order: Order) -> Order:
                # Another caller may have completed it while we waited for the lock.
                if order.is_completed:
                    return order
                now = self._clock()
                license_key = self.license_generator.generate(
                    order.machine_id, order.license_type, now
                )
                issued.append(license_key)
                return order.complete(str(license_key), now=now)

            order = await self.order_repository.mutate(order_id, complete)
            if not issued:
                span.set_attribute("fulfillment.already_completed", True)
                span.set_status(Status(StatusCode.OK))
                return self._replay(order)

            logger.info(
                "Order %s completed",
                order.id,
                extra={
                    "order_id": order.id,
                    "operation": "fulfill",
                    "license_type": order.license_type.value,
                    "trigger": trigger,
                },
            )
            orders_fulfilled_total.labels(
                license_type=order.license_type.value, trigger=trigger
            ).inc()
            await event_bus.publish(
                OrderFulfilled(
                    order_id=order.id,
                    license_type=order.license_type.value,
                    trigger=trigger,
                )
            )

            notified = await self._notify(order)
            span.set_attribute("fulfillment.notified", notified)
            span.set_status(Status(StatusCode.OK))
            fulfillment_duration_seconds.observe(time.perf_counter() - started)

            return FulfillmentResultDTO.from_completed(
                order, already_completed=False, notified=notified
            )

    async def deliver(self, order_id: str) -> Order:
        """
        Send the stored license key of a completed order again.

        Args:
            order_id: Order id

        Returns:
            Order as stored after delivery

        Raises:
            OrderNotFoundError: If the order does not exist
            OrderNotCompletedError: If the order has no license key yet
            NotificationError: If delivery failed
        """
        order = await self.order_repository.get(order_id)
        if not order.is_completed:
            raise OrderNotCompletedError(f"Order {order_id} has no license key yet")

        try:
            await self.notifier.notify(order)
        except NotificationError:
            license_notifications_total.labels(result="failed").inc()
            raise
        license_notifications_total.labels(result="sent").inc()
        return await self._record_delivery(order)

    def _replay(self, order: Order) -> FulfillmentResultDTO:
        return FulfillmentResultDTO.from_completed(
            order, already_completed=True, notified=order.notified_at is not None
        )

    async def _notify(self, order: Order) -> bool:
        """Deliver the key; a failure is logged and leaves the order COMPLETED."""
        try:
            await self.notifier.notify(order)
        except NotificationError as e:
            license_notifications_total.labels(result="failed").inc()
            logger.error(
                "License delivery failed for order %s: %s",
                order.id,
                e.message,
                extra={"order_id": order.id, "operation": "notify", "cause": e.message},
            )
            return False

        license_notifications_total.labels(result="sent").inc()
        await self._record_delivery(order)
        return True

    async def _record_delivery(self, order: Order) -> Order:
        now = self._clock()
        try:
            return await self.order_repository.mutate(
                order.id, lambda current: current.mark_notified(now=now)
            )
        except (OrderNotFoundError, OrderStoreError, OrderLockTimeoutError) as e:
            logger.warning(
                "License for order %s was sent but the delivery time was not saved: %s",
                order.id,
                e.message,
                extra={"order_id": order.id, "operation": "record_delivery"},
            )
            return order
