"""
License notifier adapters.

Delivers license keys by email through Django's mail framework; the
transport (SMTP, console, locmem in tests) comes from EMAIL_BACKEND.
"""
import logging

from asgiref.sync import sync_to_async
from django.conf import settings
from django.core.mail import EmailMultiAlternatives
from django.template.loader import render_to_string

from core.domain.exceptions import NotificationError
from orders.domain.order import Order
from orders.ports.notifier import LicenseNotifier

logger = logging.getLogger(__name__)


class EmailLicenseNotifier(LicenseNotifier):
    """Sends the license key to the order's email address."""

    template_prefix = "orders/email/license_key"

    def __init__(self, from_email: str = None, product_name: str = None):
        """Initialize notifier, defaulting to LICENSE_EMAIL_FROM and PRODUCT_NAME."""
        self.from_email = from_email or settings.LICENSE_EMAIL_FROM
        self.product_name = product_name or settings.PRODUCT_NAME

    def build_message(self, order: Order) -> EmailMultiAlternatives:
        """Render the license email for an order."""
        context = {
            "order_id": order.id,
            "license_key": order.license_key,
            "license_type": order.license_type.name.lower(),
            "product_name": self.product_name,
        }
        subject = render_to_string(f"{self.template_prefix}_subject.txt", context).strip()
        message = EmailMultiAlternatives(
            subject=subject,
            body=render_to_string(f"{self.template_prefix}.txt", context),
            from_email=self.from_email,
            to=[str(order.email)],
        )
        message.attach_alternative(render_to_string(f"{self.template_prefix}.html", context), "text/html")
        return message

    async def notify(self, order: Order) -> None:
        """
        Email the license key of a completed order.

        Args:
            order: Completed order

        Raises:
            NotificationError: If the order has no key or sending failed
        """
        if not order.license_key:
            raise NotificationError(f"Order {order.id} has no license key to send")

        try:
            message = self.build_message(order)
            await sync_to_async(message.send, thread_sensitive=False)(fail_silently=False)
        except Exception as exc:
            raise NotificationError(f"Could not email license for order {order.id}: {exc}") from exc

        logger.info("License email sent", extra={"order_id": order.id})
