"""
Unit tests for the email license notifier.
"""

from unittest.mock import patch

import pytest
from django.core.mail import EmailMultiAlternatives

from core.domain.exceptions import NotificationError
from orders.infrastructure.notifiers import EmailLicenseNotifier

LICENSE_KEY = "Y-MACHINE--20250115-c2lnbmF0dXJl"


@pytest.fixture
def completed_order(sample_order):
    return sample_order.complete(LICENSE_KEY)


@pytest.mark.asyncio
class TestEmailLicenseNotifier:
    """Tests for EmailLicenseNotifier.notify."""

    async def test_sends_license_key(self, completed_order, mailoutbox):
        """Test the key is emailed to the buyer."""
        notifier = EmailLicenseNotifier(from_email="shop@example.com", product_name="Widget")

        await notifier.notify(completed_order)

        assert len(mailoutbox) == 1
        assert mailoutbox[0].to == ["buyer@example.com"]
        assert mailoutbox[0].from_email == "shop@example.com"
        assert LICENSE_KEY in mailoutbox[0].body

    async def test_order_without_key(self, sample_order, mailoutbox):
        """Test a pending order cannot be delivered."""
        with pytest.raises(NotificationError):
            await EmailLicenseNotifier().notify(sample_order)

        assert mailoutbox == []

    async def test_missing_template(self, completed_order, mailoutbox):
        """Test a template that cannot be rendered is a delivery failure."""

        class MisconfiguredNotifier(EmailLicenseNotifier):
            template_prefix = "orders/email/missing"

        with pytest.raises(NotificationError):
            await MisconfiguredNotifier().notify(completed_order)

        assert mailoutbox == []

    @pytest.mark.parametrize("error", [OSError("connection refused"), RuntimeError("backend down")])
    async def test_backend_failure(self, completed_order, error):
        """Test any mail backend error is reported as a delivery failure."""
        with patch.object(EmailMultiAlternatives, "send", side_effect=error):
            with pytest.raises(NotificationError) as exc_info:
                await EmailLicenseNotifier().notify(completed_order)

        assert exc_info.value.__cause__ is error
