"""
CreateOrderHandler.

Handles the create order command.
"""

import logging

from core.domain.exceptions import ConfigurationError, OrderAlreadyExistsError
from core.infrastructure.events import event_bus
from core.metrics import orders_created_total
from orders.application.commands.create_order import CreateOrderCommand
from orders.application.dto.order_dto import CreateOrderResponseDTO
from orders.domain.events import OrderCreated
from orders.domain.order import Order
from orders.domain.services import generate_order_id
from orders.ports.order_repository import OrderRepository

logger = logging.getLogger(__name__)

DEFAULT_INSTRUCTIONS_TEMPLATE = "Please transfer {amount} with the reference: {order_id}"


class CreateOrderHandler:
    """Handler for CreateOrderCommand."""

    def __init__(
        self,
        order_repository: OrderRepository,
        max_attempts: int = 5,
        instructions_template: str = DEFAULT_INSTRUCTIONS_TEMPLATE,
        id_factory=generate_order_id,
    ):
        """
        Initialize handler.

        Args:
            order_repository: Order store
            max_attempts: How many fresh ids to try when one is taken
            instructions_template: Payment instructions with {amount} and
                {order_id} placeholders
            id_factory: Returns a new candidate order id
        """
        self.order_repository = order_repository
        self.max_attempts = max(1, max_attempts)
        self.instructions_template = instructions_template
        self.id_factory = id_factory

    async def handle(self, command: CreateOrderCommand) -> CreateOrderResponseDTO:
        """
        Handle create order command.

        Args:
            command: CreateOrderCommand

        Returns:
            CreateOrderResponseDTO with the order id and payment instructions

        Raises:
            OrderValidationError: If any field is missing or malformed
            OrderAlreadyExistsError: If no free id was found
        """
        order = None
        for attempt in range(1, self.max_attempts + 1):
            candidate = Order.create(
                order_id=self.id_factory(),
                machine_id=command.machine_id,
                email=command.email,
                license_type=command.license_type,
                amount=command.amount,
            )
            try:
                order = await self.order_repository.create(candidate)
                break
            except OrderAlreadyExistsError:
                logger.warning(
                    "Order id %s already taken (attempt %d of %d)",
                    candidate.id,
                    attempt,
                    self.max_attempts,
                )

        if order is None:
            raise OrderAlreadyExistsError(
                f"No free order id after {self.max_attempts} attempt(s)"
            )

        logger.info(
            "Order %s created",
            order.id,
            extra={
                "order_id": order.id,
                "operation": "create_order",
                "license_type": order.license_type.value,
            },
        )
        orders_created_total.labels(license_type=order.license_type.value).inc()
        await event_bus.publish(
            OrderCreated(
                order_id=order.id,
                license_type=order.license_type.value,
                amount=str(order.amount),
            )
        )

        return CreateOrderResponseDTO(
            order_id=order.id,
            amount=order.amount,
            instructions=self._instructions(order),
        )

    def _instructions(self, order: Order) -> str:
        try:
            return self.instructions_template.format(amount=order.amount, order_id=order.id)
        except (KeyError, IndexError, ValueError) as exc:
            raise ConfigurationError(
                f"PAYMENT_INSTRUCTIONS_TEMPLATE is invalid: {exc}"
            ) from exc
