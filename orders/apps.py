"""
App configuration for the orders module.
"""

from django.apps import AppConfig


class OrdersConfig(AppConfig):
    """App configuration for orders."""

    name = "orders"
    verbose_name = "Orders"
    default_auto_field = "django.db.models.BigAutoField"

    def ready(self):
        """Subscribe audit and metrics handlers to order events."""
        from core.infrastructure.event_handlers import register_event_handlers

        register_event_handlers()
