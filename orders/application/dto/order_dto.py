"""
Order DTOs for API responses.
"""
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from orders.domain.order import Order


@dataclass
class OrderDTO:
    """DTO for order information."""

    id: str
    machine_id: str
    email: str
    license_type: str
    amount: Decimal
    status: str
    license_key: Optional[str]
    created_at: datetime
    updated_at: datetime
    notified_at: Optional[datetime]

    @classmethod
    def from_order(cls, order: Order) -> "OrderDTO":
        """Build DTO from an Order entity."""
        return cls(
            id=order.id,
            machine_id=str(order.machine_id),
            email=str(order.email),
            license_type=order.license_type.value,
            amount=order.amount,
            status=order.status.value,
            license_key=order.license_key,
            created_at=order.created_at,
            updated_at=order.updated_at,
            notified_at=order.notified_at,
        )


@dataclass
class CreateOrderResponseDTO:
    """DTO for create order response."""

    order_id: str
    amount: Decimal
    instructions: str


@dataclass
class FulfillmentResultDTO:
    """
    DTO for the outcome of a fulfillment attempt.

    ``already_completed`` is True when the order had been fulfilled by an
    earlier call; ``notified`` then reflects whether that earlier delivery
    succeeded.
    """

    order_id: str
    fulfilled: bool
    notified: bool
    license_key: Optional[str]
    already_completed: bool = False

    @classmethod
    def from_completed(cls, order: Order, already_completed: bool, notified: bool) -> "FulfillmentResultDTO":
        """Build DTO from a completed order."""
        return cls(
            order_id=order.id,
            fulfilled=True,
            notified=notified,
            license_key=order.license_key,
            already_completed=already_completed,
        )


@dataclass
class PaymentReportResultDTO:
    """DTO for webhook payment report response."""

    matched: bool
    fulfilled: bool
    notified: bool
    reason: str
    order_id: Optional[str] = None
    license_key: Optional[str] = None


@dataclass
class DeleteOrderResultDTO:
    """DTO for delete order response."""

    order_id: str
    deleted: bool


@dataclass
class ResendLicenseResultDTO:
    """DTO for resend license response."""

    order_id: str
    queued: bool
