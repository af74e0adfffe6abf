"""
Event system for Trellis.

Allows decoupled communication between components via events and listeners.
Events are published only after a change has been persisted.
"""
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


class EventType(str, Enum):
    """Types of events in Trellis."""
    ITEM_CREATED = "item.created"
    ITEM_UPDATED = "item.updated"
    ITEM_DELETED = "item.deleted"


@dataclass
class Event:
    """Base event class."""
    type: EventType
    timestamp: datetime = field(default_factory=datetime.now)
    data: Dict[str, Any] = field(default_factory=dict)


@dataclass
class WorkItemEvent(Event):
    """Event for work-item changes within one release."""
    release_id: str = ""
    item_id: str = ""
    item_type: str = ""
    title: str = ""
    parent_id: Optional[str] = None


class EventListener(ABC):
    """Base class for event listeners."""

    @abstractmethod
    def handle(self, event: Event) -> None:
        """Handle an event.

        Args:
            event: The event to handle.
        """
        pass

    @property
    @abstractmethod
    def subscribed_events(self) -> List[EventType]:
        """Return list of event types this listener subscribes to."""
        pass


class EventBus:
    """
    Event bus for publishing and subscribing to events.

    A listener that raises is logged and skipped; the others still run.
    """

    def __init__(self) -> None:
        self._listeners: Dict[EventType, List[EventListener]] = {}

    def subscribe(self, listener: EventListener) -> None:
        """Subscribe a listener to events.

        Args:
            listener: The listener to subscribe.
        """
        for event_type in listener.subscribed_events:
            self._listeners.setdefault(event_type, []).append(listener)

    def unsubscribe(self, listener: EventListener) -> None:
        """Unsubscribe a listener from all events.

        Args:
            listener: The listener to unsubscribe.
        """
        for listeners in self._listeners.values():
            if listener in listeners:
                listeners.remove(listener)

    def publish(self, event: Event) -> None:
        """Publish an event to all subscribed listeners.

        Args:
            event: The event to publish.
        """
        for listener in list(self._listeners.get(event.type, [])):
            try:
                listener.handle(event)
            except Exception:
                logger.exception("Listener %s failed", listener.__class__.__name__)

    def clear(self) -> None:
        """Clear all listeners (useful for testing)."""
        self._listeners.clear()


class ActivityListener(EventListener):
    """Records work-item activity in the log.

    Deletions carry the removed descendant ids in ``event.data['cascade']``.
    """

    def __init__(self, activity_logger: Optional[logging.Logger] = None) -> None:
        self.logger = activity_logger or logging.getLogger("trellis.activity")

    @property
    def subscribed_events(self) -> List[EventType]:
        return [EventType.ITEM_CREATED, EventType.ITEM_UPDATED, EventType.ITEM_DELETED]

    def handle(self, event: Event) -> None:
        if not isinstance(event, WorkItemEvent):
            return

        verb = {
            EventType.ITEM_CREATED: "Created",
            EventType.ITEM_UPDATED: "Updated",
            EventType.ITEM_DELETED: "Deleted",
        }[event.type]
        cascade = event.data.get("cascade", [])
        message = f"{verb} {event.item_type} '{event.title}'"
        if cascade:
            message += f" and {len(cascade)} descendant(s)"

        self.logger.info(
            message,
            extra={"release_id": event.release_id, "item_ids": [event.item_id, *cascade]},
        )


_event_bus: Optional[EventBus] = None


def get_event_bus() -> EventBus:
    """Get the process-wide event bus."""
    global _event_bus
    if _event_bus is None:
        _event_bus = EventBus()
    return _event_bus
