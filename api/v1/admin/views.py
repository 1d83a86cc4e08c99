"""
Administrator API views.

These endpoints are used by the vendor to:
- Review orders
- Approve an order without a matched payment
- Delete orders
- Resend a license key
"""

import asyncio

from asgiref.sync import async_to_sync
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from api.exceptions import APIError
from api.v1.admin.serializers import (
    DeleteOrderResponseSerializer,
    FulfillmentResponseSerializer,
    ListOrdersResponseSerializer,
    OrderSerializer,
    ResendLicenseResponseSerializer,
)
from api.v1.orders.views import fulfillment_timed_out
from core.instrumentation import Status, StatusCode, get_tracer
from orders.application.commands.approve_order import ApproveOrderCommand
from orders.application.commands.delete_order import DeleteOrderCommand
from orders.application.commands.resend_license import ResendLicenseCommand
from orders.application.handlers.admin_order_handlers import (
    ApproveOrderHandler,
    DeleteOrderHandler,
    ResendLicenseHandler,
)
from orders.application.handlers.order_query_handlers import GetOrderHandler, ListOrdersHandler
from orders.application.queries.get_order import GetOrderQuery
from orders.application.queries.list_orders import ListOrdersQuery
from orders.infrastructure.repositories import get_order_repository
from orders.infrastructure.wiring import build_fulfillment_service, fulfillment_timeout
from orders.tasks import resend_license_email_task

tracer = get_tracer(__name__)

ADMIN_KEY_PARAMETER = OpenApiParameter(
    name="X-Admin-Key",
    type=str,
    location=OpenApiParameter.HEADER,
    required=True,
    description="Administrator key (or Authorization: Bearer <key>)",
)

STATUS_FILTERS = ("PENDING", "COMPLETED")


class ListOrdersView(APIView):
    """View for listing orders."""

    @extend_schema(
        operation_id="list_orders",
        summary="List Orders",
        description="List all orders, newest first, optionally filtered by status.",
        tags=["Admin API"],
        parameters=[
            ADMIN_KEY_PARAMETER,
            OpenApiParameter(
                name="status",
                type=str,
                location=OpenApiParameter.QUERY,
                required=False,
                enum=list(STATUS_FILTERS),
                description="Only return orders in this status",
            ),
        ],
        responses={
            200: ListOrdersResponseSerializer,
            400: {"description": "Bad Request"},
            401: {"description": "Unauthorized"},
        },
    )
    def get(self, request: Request) -> Response:
        """List orders."""
        return async_to_sync(self._handle_list_orders)(request)

    async def _handle_list_orders(self, request: Request) -> Response:
        """Async handler for list orders."""
        with tracer.start_as_current_span("list_orders") as span:
            status_filter = request.query_params.get("status")
            if status_filter:
                status_filter = status_filter.upper()
                if status_filter not in STATUS_FILTERS:
                    raise APIError(
                        detail=f"status must be one of {', '.join(STATUS_FILTERS)}",
                        code="validation_error",
                    )

            handler = ListOrdersHandler(order_repository=get_order_repository())
            orders = await handler.handle(ListOrdersQuery(status=status_filter))

            span.set_attribute("orders.count", len(orders))
            span.set_status(Status(StatusCode.OK))
            return Response(
                {"orders": OrderSerializer(orders, many=True).data, "total": len(orders)},
                status=status.HTTP_200_OK,
            )


class OrderDetailView(APIView):
    """View for reading and deleting one order."""

    @extend_schema(
        operation_id="get_order",
        summary="Get Order",
        tags=["Admin API"],
        parameters=[ADMIN_KEY_PARAMETER],
        responses={
            200: OrderSerializer,
            401: {"description": "Unauthorized"},
            404: {"description": "Order not found"},
        },
    )
    def get(self, request: Request, order_id: str) -> Response:
        """Get one order."""
        return async_to_sync(self._handle_get_order)(request, order_id)

    async def _handle_get_order(self, request: Request, order_id: str) -> Response:
        """Async handler for get order."""
        with tracer.start_as_current_span("get_order") as span:
            span.set_attribute("order.id", order_id)
            handler = GetOrderHandler(order_repository=get_order_repository())
            order = await handler.handle(GetOrderQuery(order_id=order_id))
            span.set_status(Status(StatusCode.OK))
            return Response(OrderSerializer(order).data, status=status.HTTP_200_OK)

    @extend_schema(
        operation_id="delete_order",
        summary="Delete Order",
        tags=["Admin API"],
        parameters=[ADMIN_KEY_PARAMETER],
        responses={
            200: DeleteOrderResponseSerializer,
            401: {"description": "Unauthorized"},
            404: DeleteOrderResponseSerializer,
        },
    )
    def delete(self, request: Request, order_id: str) -> Response:
        """Delete one order."""
        return async_to_sync(self._handle_delete_order)(request, order_id)

    async def _handle_delete_order(self, request: Request, order_id: str) -> Response:
        """Async handler for delete order."""
        with tracer.start_as_current_span("delete_order") as span:
            span.set_attribute("order.id", order_id)
            handler = DeleteOrderHandler(order_repository=get_order_repository())
            result = await handler.handle(DeleteOrderCommand(order_id=order_id))

            span.set_attribute("order.deleted", result.deleted)
            span.set_status(Status(StatusCode.OK))
            return Response(
                DeleteOrderResponseSerializer(result).data,
                status=status.HTTP_200_OK if result.deleted else status.HTTP_404_NOT_FOUND,
            )


class ApproveOrderView(APIView):
    """View for manually fulfilling an order."""

    @extend_schema(
        operation_id="approve_order",
        summary="Approve Order",
        description=(
            "Complete an order without a matched payment and email the license key. "
            "Approving a completed order returns its existing key."
        ),
        tags=["Admin API"],
        parameters=[ADMIN_KEY_PARAMETER],
        request=None,
        responses={
            200: FulfillmentResponseSerializer,
            401: {"description": "Unauthorized"},
            404: {"description": "Order not found"},
            500: {"description": "Signing key not configured"},
            503: {"description": "Order store unavailable or order busy"},
            504: {"description": "Fulfillment timed out"},
        },
    )
    def post(self, request: Request, order_id: str) -> Response:
        """Approve one order."""
        return async_to_sync(self._handle_approve_order)(request, order_id)

    async def _handle_approve_order(self, request: Request, order_id: str) -> Response:
        """Async handler for approve order."""
        with tracer.start_as_current_span("approve_order") as span:
            span.set_attribute("order.id", order_id)
            handler = ApproveOrderHandler(fulfillment_service=build_fulfillment_service())

            try:
                result = await asyncio.wait_for(
                    handler.handle(ApproveOrderCommand(order_id=order_id)),
                    timeout=fulfillment_timeout(),
                )
            except asyncio.TimeoutError as exc:
                span.set_status(Status(StatusCode.ERROR, "Fulfillment timed out"))
                raise fulfillment_timed_out() from exc

            span.set_attribute("fulfillment.notified", result.notified)
            span.set_status(Status(StatusCode.OK))
            return Response(FulfillmentResponseSerializer(result).data, status=status.HTTP_200_OK)


class ResendLicenseView(APIView):
    """View for queueing another delivery of a license key."""

    @extend_schema(
        operation_id="resend_license",
        summary="Resend License",
        description="Queue another email delivery of a completed order's license key.",
        tags=["Admin API"],
        parameters=[ADMIN_KEY_PARAMETER],
        request=None,
        responses={
            202: ResendLicenseResponseSerializer,
            401: {"description": "Unauthorized"},
            404: {"description": "Order not found"},
            409: {"description": "Order is not completed"},
        },
    )
    def post(self, request: Request, order_id: str) -> Response:
        """Resend the license key of one order."""
        return async_to_sync(self._handle_resend_license)(request, order_id)

    async def _handle_resend_license(self, request: Request, order_id: str) -> Response:
        """Async handler for resend license."""
        with tracer.start_as_current_span("resend_license") as span:
            span.set_attribute("order.id", order_id)
            handler = ResendLicenseHandler(
                order_repository=get_order_repository(),
                enqueue=resend_license_email_task.delay,
            )
            result = await handler.handle(ResendLicenseCommand(order_id=order_id))
            span.set_status(Status(StatusCode.OK))
            return Response(
                ResendLicenseResponseSerializer(result).data,
                status=status.HTTP_202_ACCEPTED,
            )
