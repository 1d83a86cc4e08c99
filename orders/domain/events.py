"""
Order domain events.

Domain events represent something that happened in the order domain.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from core.domain.events import DomainEvent


class OrderCreated(DomainEvent):
    """Event raised when a pending order is created."""

    def __init__(
        self,
        order_id: str,
        license_type: str,
        amount: str,
        occurred_at: Optional[datetime] = None,
    ):
        """
        Initialize OrderCreated event.

        Args:
            order_id: Order id
            license_type: Entitlement type
            amount: Expected payment as a decimal string
            occurred_at: When the event occurred
        """
        super().__init__(
            event_id=uuid.uuid4(),
            occurred_at=occurred_at or datetime.now(timezone.utc),
            aggregate_id=order_id,
            event_type="OrderCreated",
        )
        self.order_id = order_id
        self.license_type = license_type
        self.amount = amount


class OrderFulfilled(DomainEvent):
    """Event raised when an order moves to COMPLETED."""

    def __init__(
        self,
        order_id: str,
        license_type: str,
        trigger: str,
        occurred_at: Optional[datetime] = None,
    ):
        """
        Initialize OrderFulfilled event.

        Args:
            order_id: Order id
            license_type: Entitlement type
            trigger: Entry point that fulfilled the order (webhook or admin)
            occurred_at: When the event occurred
        """
        super().__init__(
            event_id=uuid.uuid4(),
            occurred_at=occurred_at or datetime.now(timezone.utc),
            aggregate_id=order_id,
            event_type="OrderFulfilled",
        )
        self.order_id = order_id
        self.license_type = license_type
        self.trigger = trigger


class OrderDeleted(DomainEvent):
    """Event raised when an administrator deletes an order."""

    def __init__(self, order_id: str, occurred_at: Optional[datetime] = None):
        """
        Initialize OrderDeleted event.

        Args:
            order_id: Order id
            occurred_at: When the event occurred
        """
        super().__init__(
            event_id=uuid.uuid4(),
            occurred_at=occurred_at or datetime.now(timezone.utc),
            aggregate_id=order_id,
            event_type="OrderDeleted",
        )
        self.order_id = order_id
