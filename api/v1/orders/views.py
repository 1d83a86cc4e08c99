"""
Public order API views.

These endpoints are used by:
- Buyers, to open an order and receive payment instructions
- The transfer gateway, to report incoming payments
"""

import asyncio

from asgiref.sync import async_to_sync
from django.conf import settings
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from api.exceptions import APIError
from api.v1.orders.serializers import (
    CreateOrderRequestSerializer,
    CreateOrderResponseSerializer,
    PaymentWebhookRequestSerializer,
    PaymentWebhookResponseSerializer,
)
from core.instrumentation import Status, StatusCode, get_tracer
from orders.application.commands.create_order import CreateOrderCommand
from orders.application.commands.report_payment import ReportPaymentCommand
from orders.application.handlers.create_order_handler import (
    DEFAULT_INSTRUCTIONS_TEMPLATE,
    CreateOrderHandler,
)
from orders.application.handlers.report_payment_handler import ReportPaymentHandler
from orders.infrastructure.repositories import get_order_repository
from orders.infrastructure.wiring import build_fulfillment_service, fulfillment_timeout

tracer = get_tracer(__name__)


def fulfillment_timed_out() -> APIError:
    """Error raised when a fulfillment request exceeds its time budget."""
    return APIError(
        detail="Fulfillment did not finish in time; retry the request",
        code="fulfillment_timeout",
        status_code=status.HTTP_504_GATEWAY_TIMEOUT,
    )


class CreateOrderView(APIView):
    """View for creating orders."""

    @extend_schema(
        operation_id="create_order",
        summary="Create Order",
        description=(
            "Open a pending order for a license. The response carries the order id "
            "and the text the buyer must put in the bank transfer."
        ),
        tags=["Orders"],
        request=CreateOrderRequestSerializer,
        responses={
            201: CreateOrderResponseSerializer,
            400: {"description": "Bad Request"},
            503: {"description": "Order store unavailable"},
        },
    )
    def post(self, request: Request) -> Response:
        """Create a pending order."""
        return async_to_sync(self._handle_create_order)(request)

    async def _handle_create_order(self, request: Request) -> Response:
        """Async handler for create order."""
        with tracer.start_as_current_span("create_order") as span:
            span.set_attribute("operation", "create_order")

            serializer = CreateOrderRequestSerializer(data=request.data)
            if not serializer.is_valid():
                span.set_attribute("error", "validation_failed")
                span.set_status(Status(StatusCode.ERROR, "Validation failed"))
                return Response(
                    {
                        "error": {
                            "code": "VALIDATION_ERROR",
                            "message": "Invalid request data",
                            "details": serializer.errors,
                        }
                    },
                    status=status.HTTP_400_BAD_REQUEST,
                )

            handler = CreateOrderHandler(
                order_repository=get_order_repository(),
                max_attempts=settings.ORDER_ID_MAX_ATTEMPTS,
                instructions_template=getattr(
                    settings, "PAYMENT_INSTRUCTIONS_TEMPLATE", DEFAULT_INSTRUCTIONS_TEMPLATE
                ),
            )
            data = serializer.validated_data
            result = await handler.handle(
                CreateOrderCommand(
                    machine_id=data["machine_id"],
                    email=data["email"],
                    license_type=data["license_type"],
                    amount=data["amount"],
                )
            )

            span.set_attribute("order.id", result.order_id)
            span.set_status(Status(StatusCode.OK))
            return Response(
                CreateOrderResponseSerializer(result).data,
                status=status.HTTP_201_CREATED,
            )


class PaymentWebhookView(APIView):
    """View receiving payment notifications."""

    @extend_schema(
        operation_id="report_payment",
        summary="Report Payment",
        description=(
            "Called by the transfer gateway for each incoming payment. The order id is "
            "read from the transfer content; a matching payment that covers the order "
            "amount completes the order and emails the license key. Unmatched payments "
            "return 200 with fulfilled=false and a reason."
        ),
        tags=["Webhooks"],
        request=PaymentWebhookRequestSerializer,
        responses={
            200: PaymentWebhookResponseSerializer,
            400: {"description": "Bad Request"},
            500: {"description": "Signing key not configured"},
            503: {"description": "Order store unavailable or order busy"},
            504: {"description": "Fulfillment timed out"},
        },
    )
    def post(self, request: Request) -> Response:
        """Match a payment to an order and fulfill it."""
        return async_to_sync(self._handle_report_payment)(request)

    async def _handle_report_payment(self, request: Request) -> Response:
        """Async handler for payment report."""
        with tracer.start_as_current_span("report_payment") as span:
            span.set_attribute("operation", "report_payment")

            serializer = PaymentWebhookRequestSerializer(data=request.data)
            if not serializer.is_valid():
                span.set_attribute("error", "validation_failed")
                span.set_status(Status(StatusCode.ERROR, "Validation failed"))
                return Response(
                    {
                        "error": {
                            "code": "VALIDATION_ERROR",
                            "message": "Invalid request data",
                            "details": serializer.errors,
                        }
                    },
                    status=status.HTTP_400_BAD_REQUEST,
                )

            repository = get_order_repository()
            handler = ReportPaymentHandler(
                order_repository=repository,
                fulfillment_service=build_fulfillment_service(),
            )
            command = ReportPaymentCommand(
                content=serializer.validated_data["content"],
                amount=serializer.validated_data["amount"],
            )

            try:
                result = await asyncio.wait_for(
                    handler.handle(command), timeout=fulfillment_timeout()
                )
            except asyncio.TimeoutError as exc:
                span.set_status(Status(StatusCode.ERROR, "Fulfillment timed out"))
                raise fulfillment_timed_out() from exc

            span.set_attribute("payment.reason", result.reason)
            if result.order_id:
                span.set_attribute("order.id", result.order_id)
            span.set_status(Status(StatusCode.OK))
            return Response(PaymentWebhookResponseSerializer(result).data, status=status.HTTP_200_OK)
