"""
Django admin configuration for orders app.
"""
from django.contrib import admin
from django.utils.html import format_html

from orders.infrastructure.models import Order


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    """Admin interface for Order model."""

    list_display = [
        "id",
        "email",
        "license_type",
        "amount",
        "status_display",
        "notified_at",
        "created_at",
    ]
    list_filter = ["status", "license_type", "created_at"]
    search_fields = ["id", "email", "machine_id"]
    readonly_fields = ["id", "license_key", "notified_at", "created_at", "updated_at"]
    fieldsets = (
        (
            "Order",
            {
                "fields": ("id", "machine_id", "email", "license_type", "amount", "status"),
            },
        ),
        (
            "License",
            {
                "fields": ("license_key", "notified_at"),
            },
        ),
        (
            "Timestamps",
            {
                "fields": ("created_at", "updated_at"),
                "classes": ("collapse",),
            },
        ),
    )

    def status_display(self, obj):
        """Display status with color coding."""
        color = "green" if obj.is_completed else "orange"
        return format_html(
            '<span style="color: {}; font-weight: bold;">{}</span>',
            color,
            obj.status,
        )

    status_display.short_description = "Status"

    def has_change_permission(self, request, obj=None):
        """Orders change only through the order service."""
        return False
