"""
GetOrderQuery.
"""

from dataclasses import dataclass


@dataclass
class GetOrderQuery:
    """Query for one order."""

    order_id: str
