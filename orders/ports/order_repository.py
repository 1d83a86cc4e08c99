"""
Order repository port (interface).

This defines the contract for order persistence operations.
Implementations are in the infrastructure layer.
"""
from abc import ABC, abstractmethod
from typing import Callable, List

from orders.domain.order import Order

OrderTransform = Callable[[Order], Order]


class OrderRepository(ABC):
    """
    Abstract repository for Order entities.

    Every operation is atomic with respect to concurrent callers on the
    same order id. ``mutate`` calls on one id are serialized.
    """

    @abstractmethod
    async def create(self, order: Order) -> Order:
        """
        Persist a new order.

        Args:
            order: Order entity to create

        Returns:
            Created order entity

        Raises:
            OrderAlreadyExistsError: If an order with the same id exists
        """
        pass

    @abstractmethod
    async def get(self, order_id: str) -> Order:
        """
        Get an order by id.

        Args:
            order_id: Order id

        Returns:
            Order entity

        Raises:
            OrderNotFoundError: If the order does not exist
        """
        pass

    @abstractmethod
    async def mutate(self, order_id: str, transform: OrderTransform) -> Order:
        """
        Read-modify-write one order under its exclusive lock.

        Args:
            order_id: Order id
            transform: Function from the current order to the new order.
                Returning the same instance leaves the record untouched.
                Exceptions raised by it abort the write and propagate.

        Returns:
            Order entity as stored after the call

        Raises:
            OrderNotFoundError: If the order does not exist
            OrderLockTimeoutError: If the lock could not be acquired in time
        """
        pass

    @abstractmethod
    async def delete(self, order_id: str) -> bool:
        """
        Delete an order.

        Args:
            order_id: Order id

        Returns:
            True if the order existed, False otherwise
        """
        pass

    @abstractmethod
    async def list(self) -> List[Order]:
        """
        List all orders, newest first.

        Returns:
            List of Order entities ordered by created_at descending
        """
        pass

    @abstractmethod
    async def count(self) -> int:
        """
        Count stored orders.

        Returns:
            Number of orders

        Raises:
            OrderStoreError: If the store cannot be read
        """
        pass
