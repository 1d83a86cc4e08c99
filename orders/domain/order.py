"""
Order domain entity.

An order is one purchase attempt. It starts PENDING and moves at most once
to COMPLETED, at which point it carries the license key issued for it.
"""
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Optional, Union

from core.domain.exceptions import (
    InvalidAmountError,
    InvalidMachineIdError,
    OrderAlreadyCompletedError,
    OrderValidationError,
)
from core.domain.value_objects import Email, LicenseType, MachineId, OrderStatus
from licenses.domain.services import parse_license_type
from orders.domain.services import ORDER_ID_PATTERN


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_amount(value: Union[str, int, float, Decimal]) -> Decimal:
    """
    Coerce an amount into a positive Decimal.

    Raises:
        InvalidAmountError: If value is not a positive number
    """
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise InvalidAmountError(f"Invalid amount: {value!r}") from exc
    if not amount.is_finite() or amount <= 0:
        raise InvalidAmountError()
    return amount


@dataclass(frozen=True)
class Order:
    """
    Order domain entity.

    Immutable; state changes return a new instance. ``license_key`` is set
    if and only if the order is COMPLETED.
    """

    id: str
    machine_id: MachineId
    email: Email
    license_type: LicenseType
    amount: Decimal
    status: OrderStatus
    license_key: Optional[str]
    created_at: datetime
    updated_at: datetime
    notified_at: Optional[datetime] = None

    def __post_init__(self):
        """Validate order entity."""
        if not ORDER_ID_PATTERN.fullmatch(self.id or ""):
            raise OrderValidationError(f"Invalid order id: {self.id!r}")
        if self.amount <= 0:
            raise InvalidAmountError()
        if (self.status == OrderStatus.COMPLETED) != bool(self.license_key):
            raise OrderValidationError(
                "License key must be present if and only if the order is completed"
            )

    @classmethod
    def create(
        cls,
        order_id: str,
        machine_id: str,
        email: str,
        license_type: Union[str, LicenseType],
        amount: Union[str, int, float, Decimal],
        now: Optional[datetime] = None,
    ) -> "Order":
        """
        Create a new pending order.

        Args:
            order_id: Order id in TT#### format
            machine_id: Target installation identifier
            email: Delivery address for the license
            license_type: Entitlement type (M, Y or P)
            amount: Expected payment
            now: Creation time (defaults to now)

        Returns:
            Order entity instance

        Raises:
            OrderValidationError: If any field is missing or malformed
        """
        try:
            machine = MachineId(machine_id)
        except ValueError as exc:
            raise InvalidMachineIdError(str(exc)) from exc
        try:
            delivery_email = Email(email)
        except ValueError as exc:
            raise OrderValidationError(str(exc)) from exc

        created_at = now or _utcnow()
        return cls(
            id=order_id,
            machine_id=machine,
            email=delivery_email,
            license_type=parse_license_type(license_type),
            amount=parse_amount(amount),
            status=OrderStatus.PENDING,
            license_key=None,
            created_at=created_at,
            updated_at=created_at,
        )

    @property
    def is_completed(self) -> bool:
        """Check if the order has been fulfilled."""
        return self.status == OrderStatus.COMPLETED

    def complete(self, license_key: str, now: Optional[datetime] = None) -> "Order":
        """
        Create a new Order instance in COMPLETED state.

        Args:
            license_key: License key issued for this order
            now: Transition time (defaults to now)

        Raises:
            OrderAlreadyCompletedError: If the order already carries a key
        """
        if self.is_completed:
            raise OrderAlreadyCompletedError(f"Order {self.id} is already completed")
        return replace(
            self,
            status=OrderStatus.COMPLETED,
            license_key=license_key,
            updated_at=now or _utcnow(),
        )

    def mark_notified(self, now: Optional[datetime] = None) -> "Order":
        """Create a new Order instance recording a successful delivery."""
        timestamp = now or _utcnow()
        return replace(self, notified_at=timestamp, updated_at=timestamp)
