"""
Order query handlers.
"""

from typing import List

from core.domain.value_objects import OrderStatus
from orders.application.dto.order_dto import OrderDTO
from orders.application.queries.get_order import GetOrderQuery
from orders.application.queries.list_orders import ListOrdersQuery
from orders.ports.order_repository import OrderRepository


class ListOrdersHandler:
    """Handler for ListOrdersQuery."""

    def __init__(self, order_repository: OrderRepository):
        """Initialize handler with repository."""
        self.order_repository = order_repository

    async def handle(self, query: ListOrdersQuery) -> List[OrderDTO]:
        """
        List orders, newest first.

        Args:
            query: ListOrdersQuery

        Returns:
            List of OrderDTO
        """
        orders = await self.order_repository.list()
        if query.status:
            wanted = OrderStatus(query.status)
            orders = [order for order in orders if order.status == wanted]
        return [OrderDTO.from_order(order) for order in orders]


class GetOrderHandler:
    """Handler for GetOrderQuery."""

    def __init__(self, order_repository: OrderRepository):
        """Initialize handler with repository."""
        self.order_repository = order_repository

    async def handle(self, query: GetOrderQuery) -> OrderDTO:
        """
        Get one order.

        Raises:
            OrderNotFoundError: If the order does not exist
        """
        order = await self.order_repository.get(query.order_id)
        return OrderDTO.from_order(order)
