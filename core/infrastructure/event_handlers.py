"""
Event handlers for domain events.

These handlers process domain events for side effects
like audit logging and metrics.
"""

import logging

from core.domain.events import DomainEvent, EventHandler
from core.infrastructure.events import event_bus
from core.metrics import orders_deleted_total
from orders.domain.events import OrderCreated, OrderDeleted, OrderFulfilled

logger = logging.getLogger(__name__)
audit_logger = logging.getLogger("audit")


class AuditLogEventHandler(EventHandler):
    """Writes one structured audit line per domain event."""

    async def handle(self, event: DomainEvent) -> None:
        """
        Handle domain event for audit logging.

        Args:
            event: Domain event to log
        """
        audit_logger.info(
            "%s %s",
            event.event_type,
            event.aggregate_id,
            extra={"event": event.to_dict()},
        )


class OrderMetricsEventHandler(EventHandler):
    """Counts order events that no handler records inline."""

    async def handle(self, event: DomainEvent) -> None:
        """
        Handle order event for metrics.

        Args:
            event: Domain event
        """
        if isinstance(event, OrderDeleted):
            orders_deleted_total.inc()


_registered = False


def register_event_handlers() -> None:
    """Subscribe handlers to the global event bus once per process."""
    global _registered
    if _registered:
        return

    audit_handler = AuditLogEventHandler()
    for event_type in (OrderCreated, OrderFulfilled, OrderDeleted):
        event_bus.subscribe(event_type, audit_handler)
    event_bus.subscribe(OrderDeleted, OrderMetricsEventHandler())

    _registered = True
    logger.info("Event handlers registered")
