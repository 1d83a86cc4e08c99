"""
ListOrdersQuery.

Query to list orders for the administrator, optionally by status.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class ListOrdersQuery:
    """Query for orders, newest first."""

    status: Optional[str] = None  # PENDING or COMPLETED
