"""
Domain event base classes.

Events are published after a state change has been committed; subscribers
(audit log, metrics) never take part in the change itself.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, Type
from uuid import UUID

_ENVELOPE_FIELDS = ("event_id", "occurred_at", "aggregate_id", "event_type")


class DomainEvent(ABC):
    """
    Base class for all domain events.

    Subclasses add their payload as plain attributes after calling
    ``super().__init__``.
    """

    def __init__(
        self,
        event_id: UUID,
        occurred_at: datetime,
        aggregate_id: str,
        event_type: str,
    ):
        self.event_id = event_id
        self.occurred_at = occurred_at
        self.aggregate_id = aggregate_id
        self.event_type = event_type

    def payload(self) -> Dict[str, Any]:
        """Return the event-specific attributes."""
        return {
            name: value
            for name, value in vars(self).items()
            if name not in _ENVELOPE_FIELDS
        }

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to a JSON-compatible dictionary."""
        return {
            "event_id": str(self.event_id),
            "occurred_at": self.occurred_at.isoformat(),
            "aggregate_id": self.aggregate_id,
            "event_type": self.event_type,
            "payload": self.payload(),
        }


class EventHandler(ABC):
    """Receives published domain events."""

    @abstractmethod
    async def handle(self, event: DomainEvent) -> None:
        """Handle a domain event."""


class EventBus(ABC):
    """Publishes domain events to subscribed handlers."""

    @abstractmethod
    async def publish(self, event: DomainEvent) -> None:
        """Deliver an event to every handler subscribed to its type."""

    @abstractmethod
    def subscribe(self, event_type: Type[DomainEvent], handler: EventHandler) -> None:
        """Register a handler for one event type."""
