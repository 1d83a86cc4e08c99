"""
CreateOrderCommand.

Command to open a pending order awaiting a bank transfer.
"""

from dataclasses import dataclass
from decimal import Decimal


@dataclass
class CreateOrderCommand:
    """Command to create an order."""

    machine_id: str
    email: str
    license_type: str  # M, Y or P
    amount: Decimal
