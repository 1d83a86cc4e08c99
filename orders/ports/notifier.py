"""
License notifier port (interface).

Delivers an issued license key to the purchaser. Delivery happens after the
order is committed and never changes its fulfillment state.
"""
from abc import ABC, abstractmethod

from orders.domain.order import Order


class LicenseNotifier(ABC):
    """Abstract channel for delivering license keys."""

    @abstractmethod
    async def notify(self, order: Order) -> None:
        """
        Deliver the license key of a completed order.

        Args:
            order: Completed order carrying the license key

        Raises:
            NotificationError: If delivery failed
        """
        pass
