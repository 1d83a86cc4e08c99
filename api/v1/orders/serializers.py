"""
Serializers for the public order API endpoints.
"""

from decimal import Decimal

from rest_framework import serializers

from core.domain.value_objects import MACHINE_HASH_LENGTH


class CreateOrderRequestSerializer(serializers.Serializer):
    """Serializer for create order request."""

    machine_id = serializers.CharField(
        required=True, min_length=MACHINE_HASH_LENGTH, max_length=500, trim_whitespace=False
    )
    email = serializers.EmailField(required=True)
    license_type = serializers.ChoiceField(choices=["M", "Y", "P"], required=True)
    amount = serializers.DecimalField(
        max_digits=14, decimal_places=2, min_value=Decimal("0.01"), required=True
    )


class CreateOrderResponseSerializer(serializers.Serializer):
    """Serializer for create order response."""

    order_id = serializers.CharField()
    amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    instructions = serializers.CharField()


class PaymentWebhookRequestSerializer(serializers.Serializer):
    """Serializer for a payment notification from the transfer gateway."""

    content = serializers.CharField(required=False, allow_blank=True, default="")
    amount = serializers.DecimalField(
        max_digits=16, decimal_places=2, min_value=Decimal("0"), required=True
    )


class PaymentWebhookResponseSerializer(serializers.Serializer):
    """Serializer for payment webhook response."""

    matched = serializers.BooleanField()
    fulfilled = serializers.BooleanField()
    notified = serializers.BooleanField()
    reason = serializers.CharField()
    order_id = serializers.CharField(allow_null=True, required=False)
    license_key = serializers.CharField(allow_null=True, required=False)
