"""
Default adapters for the order use cases.

Views and tasks build their handlers from here; tests pass their own
adapters to the handlers directly.
"""
from django.conf import settings

from licenses.infrastructure.signing import get_license_generator
from orders.application.services.fulfillment import OrderFulfillmentService
from orders.infrastructure.notifiers import EmailLicenseNotifier
from orders.infrastructure.repositories import get_order_repository


def build_fulfillment_service() -> OrderFulfillmentService:
    """Return a fulfillment service wired to the configured store, key and mailer."""
    return OrderFulfillmentService(
        order_repository=get_order_repository(),
        license_generator=get_license_generator(),
        notifier=EmailLicenseNotifier(),
    )


def fulfillment_timeout() -> float:
    """Return the upper bound, in seconds, for one fulfillment request."""
    return float(getattr(settings, "FULFILLMENT_TIMEOUT_SECONDS", 30.0))
