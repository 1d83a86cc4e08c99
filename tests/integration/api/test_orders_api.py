"""
Integration tests for the public order API.
"""

import json
import re

import pytest
from django.urls import reverse

from orders.infrastructure.models import Order as OrderModel

ORDER_PAYLOAD = {
    "machine_id": "MACHINE-0001",
    "email": "buyer@example.com",
    "license_type": "Y",
    "amount": "200000",
}


def create_order(api_client, **overrides):
    payload = dict(ORDER_PAYLOAD, **overrides)
    return api_client.post(reverse("create-order"), payload, format="json")


def report_payment(api_client, content, amount):
    return api_client.post(
        reverse("payment-webhook"),
        {"content": content, "amount": amount},
        format="json",
    )


@pytest.mark.django_db
@pytest.mark.integration
class TestCreateOrderAPI:
    """Integration tests for order creation."""

    def test_create_order_success(self, api_client):
        """Test a valid request opens a pending order."""
        response = create_order(api_client)

        assert response.status_code == 201
        data = response.json()
        assert re.fullmatch(r"TT\d{4}", data["order_id"])
        assert data["order_id"] in data["instructions"]
        order = OrderModel.objects.get(id=data["order_id"])
        assert order.status == "PENDING"
        assert order.license_key is None
        assert order.machine_id == "MACHINE-0001"

    def test_create_order_missing_fields(self, api_client):
        """Test a request without email is rejected."""
        response = api_client.post(
            reverse("create-order"),
            {"machine_id": "MACHINE-0001", "license_type": "Y", "amount": "1"},
            format="json",
        )

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "VALIDATION_ERROR"
        assert "email" in error["details"]
        assert OrderModel.objects.count() == 0

    @pytest.mark.parametrize(
        "field,value",
        [
            ("license_type", "W"),
            ("amount", "0"),
            ("amount", "-5"),
            ("machine_id", "short"),
            ("email", "not-an-email"),
        ],
    )
    def test_create_order_invalid_field(self, api_client, field, value):
        """Test malformed fields are rejected."""
        response = create_order(api_client, **{field: value})

        assert response.status_code == 400
        assert field in response.json()["error"]["details"]


@pytest.mark.django_db
@pytest.mark.integration
class TestPaymentWebhookAPI:
    """Integration tests for the payment webhook."""

    def test_payment_fulfills_order(self, api_client, signing_configured, mailoutbox):
        """Test a covering transfer completes the order and emails the key."""
        order_id = create_order(api_client).json()["order_id"]

        response = report_payment(api_client, f"CHUYEN KHOAN {order_id} NOIDUNG", "200000")

        assert response.status_code == 200
        data = response.json()
        assert data["matched"] is True
        assert data["fulfilled"] is True
        assert data["notified"] is True
        assert data["reason"] == "FULFILLED"
        assert data["order_id"] == order_id
        assert data["license_key"].startswith("Y-MACHINE--")

        order = OrderModel.objects.get(id=order_id)
        assert order.status == "COMPLETED"
        assert order.license_key == data["license_key"]
        assert order.notified_at is not None

        assert len(mailoutbox) == 1
        assert mailoutbox[0].to == ["buyer@example.com"]
        assert mailoutbox[0].from_email == "licenses@example.com"
        assert data["license_key"] in mailoutbox[0].body

    def test_repeated_payment_replays_key(self, api_client, signing_configured, mailoutbox):
        """Test a second notification returns the same key without another email."""
        order_id = create_order(api_client).json()["order_id"]
        first = report_payment(api_client, order_id, "200000").json()

        second = report_payment(api_client, order_id.lower(), "200000")

        assert second.status_code == 200
        assert second.json()["reason"] == "ALREADY_COMPLETED"
        assert second.json()["license_key"] == first["license_key"]
        assert len(mailoutbox) == 1

    def test_overpayment_is_accepted(self, api_client, signing_configured, mailoutbox):
        """Test paying more than the order amount completes it."""
        order_id = create_order(api_client).json()["order_id"]

        response = report_payment(api_client, f"{order_id}THANKS", "250000")

        assert response.json()["fulfilled"] is True

    def test_insufficient_amount(self, api_client, signing_configured, mailoutbox):
        """Test an underpayment leaves the order pending."""
        order_id = create_order(api_client).json()["order_id"]

        response = report_payment(api_client, order_id, "199999.99")

        assert response.status_code == 200
        data = response.json()
        assert data["matched"] is True
        assert data["fulfilled"] is False
        assert data["reason"] == "AMOUNT_INSUFFICIENT"
        assert data["license_key"] is None
        assert OrderModel.objects.get(id=order_id).status == "PENDING"
        assert mailoutbox == []

    def test_content_without_order_code(self, api_client):
        """Test a transfer without a code is not matched."""
        response = report_payment(api_client, "payment for license", "200000")

        assert response.status_code == 200
        assert response.json()["matched"] is False
        assert response.json()["reason"] == "NO_ORDER_CODE"

    def test_unknown_order(self, api_client):
        """Test a code for a missing order is not matched."""
        response = report_payment(api_client, "TT9999", "200000")

        assert response.status_code == 200
        assert response.json()["reason"] == "ORDER_NOT_FOUND"
        assert response.json()["order_id"] == "TT9999"

    def test_missing_amount(self, api_client):
        """Test a notification without an amount is rejected."""
        response = api_client.post(reverse("payment-webhook"), {"content": "TT1234"}, format="json")

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    def test_signing_key_not_configured(self, api_client, mailoutbox):
        """Test fulfillment fails loudly when no signing key is loaded."""
        order_id = create_order(api_client).json()["order_id"]

        response = report_payment(api_client, order_id, "200000")

        assert response.status_code == 500
        assert response.json()["error"]["code"] == "SIGNING_KEY_NOT_CONFIGURED"
        assert OrderModel.objects.get(id=order_id).status == "PENDING"
        assert mailoutbox == []


@pytest.mark.django_db
@pytest.mark.integration
class TestJsonStoreAPI:
    """Integration tests running the public API against the JSON file store."""

    def test_full_flow(self, api_client, json_store, signing_configured, mailoutbox):
        """Test creating and paying for an order persists to the JSON document."""
        order_id = create_order(api_client, license_type="P").json()["order_id"]

        response = report_payment(api_client, f"CK {order_id}", "200000")

        assert response.json()["license_key"].startswith("P-MACHINE--FOREVER-")
        document = json.loads(json_store.read_text(encoding="utf-8"))
        assert document[order_id]["status"] == "COMPLETED"
        assert document[order_id]["licenseKey"] == response.json()["license_key"]
        assert OrderModel.objects.count() == 0
        assert len(mailoutbox) == 1
