"""
Serializers for administrator API endpoints.
"""

from rest_framework import serializers


class OrderSerializer(serializers.Serializer):
    """Serializer for OrderDTO."""

    id = serializers.CharField()
    machine_id = serializers.CharField()
    email = serializers.EmailField()
    license_type = serializers.CharField()
    amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    status = serializers.CharField()
    license_key = serializers.CharField(allow_null=True)
    created_at = serializers.DateTimeField()
    updated_at = serializers.DateTimeField()
    notified_at = serializers.DateTimeField(allow_null=True)


class ListOrdersResponseSerializer(serializers.Serializer):
    """Serializer for list orders response."""

    orders = OrderSerializer(many=True)
    total = serializers.IntegerField()


class FulfillmentResponseSerializer(serializers.Serializer):
    """Serializer for approve order response."""

    order_id = serializers.CharField()
    fulfilled = serializers.BooleanField()
    notified = serializers.BooleanField()
    already_completed = serializers.BooleanField()
    license_key = serializers.CharField(allow_null=True)


class DeleteOrderResponseSerializer(serializers.Serializer):
    """Serializer for delete order response."""

    order_id = serializers.CharField()
    deleted = serializers.BooleanField()


class ResendLicenseResponseSerializer(serializers.Serializer):
    """Serializer for resend license response."""

    order_id = serializers.CharField()
    queued = serializers.BooleanField()
