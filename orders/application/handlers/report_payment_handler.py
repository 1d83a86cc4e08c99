"""
ReportPaymentHandler.

Matches a bank-transfer notification to an order and fulfills it.
"""

import logging

from core.domain.exceptions import OrderNotFoundError
from core.metrics import payment_reports_total
from orders.application.commands.report_payment import ReportPaymentCommand
from orders.application.dto.order_dto import FulfillmentResultDTO, PaymentReportResultDTO
from orders.application.services.fulfillment import OrderFulfillmentService
from orders.domain.services import PaymentMatcher
from orders.ports.order_repository import OrderRepository

logger = logging.getLogger(__name__)

NO_ORDER_CODE = "NO_ORDER_CODE"
ORDER_NOT_FOUND = "ORDER_NOT_FOUND"
AMOUNT_INSUFFICIENT = "AMOUNT_INSUFFICIENT"
FULFILLED = "FULFILLED"
ALREADY_COMPLETED = "ALREADY_COMPLETED"


class ReportPaymentHandler:
    """Handler for ReportPaymentCommand."""

    def __init__(
        self,
        order_repository: OrderRepository,
        fulfillment_service: OrderFulfillmentService,
    ):
        """Initialize handler with repository and fulfillment service."""
        self.order_repository = order_repository
        self.fulfillment_service = fulfillment_service

    async def handle(self, command: ReportPaymentCommand) -> PaymentReportResultDTO:
        """
        Handle a payment report.

        Unmatched payments are business outcomes, not errors: they come back
        with ``matched=False`` or ``fulfilled=False`` and a reason code.

        Args:
            command: ReportPaymentCommand

        Returns:
            PaymentReportResultDTO

        Raises:
            ConfigurationError: If no signing key is configured
            OrderStoreError: If the order store is unavailable
        """
        order_id = PaymentMatcher.extract_order_id(command.content)
        if order_id is None:
            logger.info("Payment report without an order code", extra={"operation": "report_payment"})
            return self._outcome(PaymentReportResultDTO(
                matched=False, fulfilled=False, notified=False, reason=NO_ORDER_CODE
            ))

        try:
            order = await self.order_repository.get(order_id)
        except OrderNotFoundError:
            return self._order_not_found(order_id)

        # A repeated notification for a completed order replays the stored key.
        if not order.is_completed and not PaymentMatcher.amount_satisfies(
            command.amount, order.amount
        ):
            logger.warning(
                "Payment of %s for order %s is below the expected %s",
                command.amount,
                order_id,
                order.amount,
                extra={"order_id": order_id, "operation": "report_payment"},
            )
            return self._outcome(PaymentReportResultDTO(
                matched=True,
                fulfilled=False,
                notified=False,
                reason=AMOUNT_INSUFFICIENT,
                order_id=order_id,
            ))

        try:
            result = await self.fulfillment_service.fulfill(order_id, trigger="webhook")
        except OrderNotFoundError:
            # Deleted between the lookup and the fulfill.
            return self._order_not_found(order_id)
        return self._outcome(self._from_fulfillment(result))

    def _order_not_found(self, order_id: str) -> PaymentReportResultDTO:
        logger.info(
            "Payment report for unknown order %s",
            order_id,
            extra={"order_id": order_id, "operation": "report_payment"},
        )
        return self._outcome(PaymentReportResultDTO(
            matched=False,
            fulfilled=False,
            notified=False,
            reason=ORDER_NOT_FOUND,
            order_id=order_id,
        ))

    @staticmethod
    def _from_fulfillment(result: FulfillmentResultDTO) -> PaymentReportResultDTO:
        return PaymentReportResultDTO(
            matched=True,
            fulfilled=result.fulfilled,
            notified=result.notified,
            reason=ALREADY_COMPLETED if result.already_completed else FULFILLED,
            order_id=result.order_id,
            license_key=result.license_key,
        )

    @staticmethod
    def _outcome(result: PaymentReportResultDTO) -> PaymentReportResultDTO:
        payment_reports_total.labels(outcome=result.reason).inc()
        return result
