"""
DeleteOrderCommand.
"""

from dataclasses import dataclass


@dataclass
class DeleteOrderCommand:
    """Command to delete an order."""

    order_id: str
