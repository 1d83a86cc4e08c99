"""
Administrator order handlers.

Handles approve, delete and resend commands.
"""

import logging
from typing import Callable

from asgiref.sync import sync_to_async

from core.domain.exceptions import OrderNotCompletedError
from core.infrastructure.events import event_bus
from orders.application.commands.approve_order import ApproveOrderCommand
from orders.application.commands.delete_order import DeleteOrderCommand
from orders.application.commands.resend_license import ResendLicenseCommand
from orders.application.dto.order_dto import (
    DeleteOrderResultDTO,
    FulfillmentResultDTO,
    ResendLicenseResultDTO,
)
from orders.application.services.fulfillment import OrderFulfillmentService
from orders.domain.events import OrderDeleted
from orders.ports.order_repository import OrderRepository

logger = logging.getLogger(__name__)


class ApproveOrderHandler:
    """Handler for ApproveOrderCommand."""

    def __init__(self, fulfillment_service: OrderFulfillmentService):
        """Initialize handler with fulfillment service."""
        self.fulfillment_service = fulfillment_service

    async def handle(self, command: ApproveOrderCommand) -> FulfillmentResultDTO:
        """
        Fulfill an order without checking any payment.

        Raises:
            OrderNotFoundError: If the order does not exist
            ConfigurationError: If no signing key is configured
        """
        logger.info(
            "Manual approval of order %s",
            command.order_id,
            extra={"order_id": command.order_id, "operation": "approve_order"},
        )
        return await self.fulfillment_service.fulfill(command.order_id, trigger="admin")


class DeleteOrderHandler:
    """Handler for DeleteOrderCommand."""

    def __init__(self, order_repository: OrderRepository):
        """Initialize handler with repository."""
        self.order_repository = order_repository

    async def handle(self, command: DeleteOrderCommand) -> DeleteOrderResultDTO:
        """
        Delete an order.

        Returns:
            DeleteOrderResultDTO; ``deleted`` is False if there was no such order
        """
        deleted = await self.order_repository.delete(command.order_id)
        if deleted:
            logger.info(
                "Order %s deleted",
                command.order_id,
                extra={"order_id": command.order_id, "operation": "delete_order"},
            )
            await event_bus.publish(OrderDeleted(order_id=command.order_id))
        return DeleteOrderResultDTO(order_id=command.order_id, deleted=deleted)


class ResendLicenseHandler:
    """Handler for ResendLicenseCommand."""

    def __init__(self, order_repository: OrderRepository, enqueue: Callable[[str], None]):
        """
        Initialize handler.

        Args:
            order_repository: Order store
            enqueue: Schedules background delivery for an order id
        """
        self.order_repository = order_repository
        self.enqueue = enqueue

    async def handle(self, command: ResendLicenseCommand) -> ResendLicenseResultDTO:
        """
        Queue another delivery of a completed order's license key.

        Raises:
            OrderNotFoundError: If the order does not exist
            OrderNotCompletedError: If the order is still pending
        """
        order = await self.order_repository.get(command.order_id)
        if not order.is_completed:
            raise OrderNotCompletedError(f"Order {order.id} has no license key to resend")

        # Publishing to the broker blocks, and an eager worker runs inline.
        await sync_to_async(self.enqueue)(order.id)
        logger.info(
            "License resend queued for order %s",
            order.id,
            extra={"order_id": order.id, "operation": "resend_license"},
        )
        return ResendLicenseResultDTO(order_id=order.id, queued=True)
