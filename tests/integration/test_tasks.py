"""
Integration tests for order background tasks.
"""

from decimal import Decimal
from unittest.mock import patch

import pytest
from celery.exceptions import Retry

from core.domain.exceptions import NotificationError
from orders.application.services.fulfillment import OrderFulfillmentService
from orders.infrastructure.models import Order as OrderModel
from orders.tasks import resend_license_email_task


@pytest.fixture
def completed_order(db):
    return OrderModel.objects.create(
        id="TT1001",
        machine_id="MACHINE-0001",
        email="buyer@example.com",
        license_type="M",
        amount=Decimal("50000"),
        status="COMPLETED",
        license_key="M-MACHINE--20240215-c2lnbmF0dXJl",
    )


def service_with(repository, generator, notifier):
    return OrderFulfillmentService(
        order_repository=repository, license_generator=generator, notifier=notifier
    )


@pytest.mark.django_db
@pytest.mark.integration
class TestResendLicenseEmailTask:
    """Integration tests for resend_license_email_task."""

    def test_sends_stored_key(self, completed_order, mailoutbox):
        """Test the stored key is emailed and the delivery recorded."""
        assert resend_license_email_task("TT1001") is True

        assert len(mailoutbox) == 1
        assert "M-MACHINE--20240215-c2lnbmF0dXJl" in mailoutbox[0].body
        assert OrderModel.objects.get(id="TT1001").notified_at is not None

    def test_skips_unknown_order(self, mailoutbox):
        """Test a deleted order is skipped without retrying."""
        assert resend_license_email_task("TT0000") is False
        assert mailoutbox == []

    def test_skips_pending_order(self, completed_order, mailoutbox):
        """Test a pending order is skipped without retrying."""
        OrderModel.objects.filter(id="TT1001").update(status="PENDING", license_key=None)

        assert resend_license_email_task("TT1001") is False
        assert mailoutbox == []

    def test_retries_failed_delivery(
        self, completed_order, django_repository, license_generator, failing_notifier
    ):
        """Test a failed delivery is retried with backoff."""
        service = service_with(django_repository, license_generator, failing_notifier)

        with patch("orders.tasks.build_fulfillment_service", return_value=service), patch.object(
            resend_license_email_task, "retry", side_effect=Retry()
        ) as retry:
            with pytest.raises(Retry):
                resend_license_email_task("TT1001")

        _, kwargs = retry.call_args
        assert isinstance(kwargs["exc"], NotificationError)
        assert kwargs["countdown"] == 1
        assert OrderModel.objects.get(id="TT1001").notified_at is None
