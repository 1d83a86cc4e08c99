"""
ReportPaymentCommand.

Command carrying a payment notification from the bank-transfer webhook.
"""

from dataclasses import dataclass
from decimal import Decimal


@dataclass
class ReportPaymentCommand:
    """Command to match a reported transfer to an order."""

    content: str  # Free-text transfer note
    amount: Decimal
