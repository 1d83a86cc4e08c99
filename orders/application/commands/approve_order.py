"""
ApproveOrderCommand.

Command for an administrator to fulfill an order without a payment match.
"""

from dataclasses import dataclass


@dataclass
class ApproveOrderCommand:
    """Command to manually fulfill an order."""

    order_id: str
