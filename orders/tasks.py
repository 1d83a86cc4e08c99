"""
Celery tasks for the orders module.
"""
import logging

from asgiref.sync import async_to_sync

from LicenseOrderService.celery import app

from core.domain.exceptions import NotificationError, OrderNotCompletedError, OrderNotFoundError
from orders.infrastructure.wiring import build_fulfillment_service

logger = logging.getLogger(__name__)


@app.task(bind=True, max_retries=3)
def resend_license_email_task(self, order_id: str) -> bool:
    """
    Deliver the stored license key of a completed order again.

    Failed deliveries are retried with exponential backoff.

    Args:
        order_id: Order id

    Returns:
        True if the key was sent, False if the order cannot be resent
    """
    service = build_fulfillment_service()
    try:
        async_to_sync(service.deliver)(order_id)
    except (OrderNotFoundError, OrderNotCompletedError) as exc:
        logger.warning(
            "Skipping license resend for order %s: %s",
            order_id,
            exc.message,
            extra={"order_id": order_id, "operation": "resend_license"},
        )
        return False
    except NotificationError as exc:
        logger.error(
            "License resend failed for order %s: %s",
            order_id,
            exc.message,
            extra={
                "order_id": order_id,
                "operation": "resend_license",
                "retries": self.request.retries,
            },
        )
        raise self.retry(exc=exc, countdown=2 ** self.request.retries)

    logger.info(
        "License resent for order %s",
        order_id,
        extra={"order_id": order_id, "operation": "resend_license"},
    )
    return True
