"""Event manager for audit events and Server-Sent Events (SSE)."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import TYPE_CHECKING, Any
from uuid import uuid4

if TYPE_CHECKING:
    from examportal.store import PortalStore

logger = logging.getLogger(__name__)


class EventType(str, Enum):
    """Types of events that can be emitted."""

    REGISTRATION_COMPLETED = "registration_completed"
    AUDIT = "audit"
    HEARTBEAT = "heartbeat"


@dataclass
class Event:
    """An event to be sent via SSE and to listeners."""

    event_type: EventType
    data: dict[str, Any]
    student_id: str | None = None

    def to_sse(self) -> str:
        """Convert to SSE format."""
        return f"event: {self.event_type.value}\ndata: {json.dumps(self.data)}\n\n"


@dataclass
class Subscriber:
    """A subscriber to the event stream."""

    id: str
    queue: asyncio.Queue[Event]
    student_id: str | None = None  # None means subscribe to all students
    loop: asyncio.AbstractEventLoop | None = None

    @classmethod
    def create(cls, student_id: str | None = None) -> Subscriber:
        """Create a new subscriber bound to the running event loop, if any."""
        try:
            loop: asyncio.AbstractEventLoop | None = asyncio.get_running_loop()
        except RuntimeError:
            loop = None
        return cls(id=str(uuid4()), queue=asyncio.Queue(), student_id=student_id, loop=loop)

    def deliver(self, event: Event) -> None:
        """Queue an event from any thread."""
        if self.loop is not None and not self.loop.is_closed():
            self.loop.call_soon_threadsafe(self.queue.put_nowait, event)
        else:
            self.queue.put_nowait(event)


EventListener = Callable[[Event], None]


@dataclass
class EventManager:
    """Fans events out to SSE subscribers and in-process listeners."""

    _subscribers: dict[str, Subscriber] = field(default_factory=dict)
    _listeners: list[EventListener] = field(default_factory=list)
    _heartbeat_interval: int = 30  # seconds

    def subscribe(self, student_id: str | None = None) -> Subscriber:
        """Subscribe a client to events.

        Args:
            student_id: Optional student ID to filter events. None means all.

        Returns:
            Subscriber instance for receiving events.
        """
        subscriber = Subscriber.create(student_id)
        self._subscribers[subscriber.id] = subscriber
        return subscriber

    def unsubscribe(self, subscriber_id: str) -> None:
        """Unsubscribe a client from events."""
        self._subscribers.pop(subscriber_id, None)

    def add_listener(self, listener: EventListener) -> None:
        """Register a callback invoked for every emitted event."""
        self._listeners.append(listener)

    def emit_sync(self, event: Event) -> None:
        """Emit an event to listeners and matching subscribers.

        Listener failures are logged and never reach the emitter.
        """
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception as e:
                logger.exception("Event listener failed for %s: %s", event.event_type.value, e)

        for subscriber in list(self._subscribers.values()):
            if subscriber.student_id is None or subscriber.student_id == event.student_id:
                subscriber.deliver(event)

    @property
    def subscriber_count(self) -> int:
        """Get the number of active subscribers."""
        return len(self._subscribers)

    # Convenience methods for emitting specific event types

    def emit_registration_completed(
        self,
        student_id: str,
        exam_id: str,
        ticket_ref: str,
        amount: str,
        status: str,
    ) -> None:
        """Emit a registration_completed event."""
        event = Event(
            event_type=EventType.REGISTRATION_COMPLETED,
            student_id=student_id,
            data={
                "student_id": student_id,
                "exam_id": exam_id,
                "ticket_ref": ticket_ref,
                "amount": amount,
                "status": status,
                "timestamp": _timestamp(),
            },
        )
        self.emit_sync(event)

    def emit_audit(self, actor: str, action: str, student_id: str | None = None) -> None:
        """Emit an audit event for a catalog change."""
        event = Event(
            event_type=EventType.AUDIT,
            student_id=student_id,
            data={"actor": actor, "action": action, "timestamp": _timestamp()},
        )
        self.emit_sync(event)

    def create_heartbeat_event(self) -> Event:
        """Create a heartbeat event."""
        return Event(
            event_type=EventType.HEARTBEAT,
            student_id=None,
            data={"timestamp": _timestamp()},
        )


def _timestamp() -> str:
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")


def audit_listener(store: PortalStore) -> EventListener:
    """Build a listener that writes audit-worthy events to the audit log."""

    def record(event: Event) -> None:
        if event.event_type == EventType.REGISTRATION_COMPLETED:
            data = event.data
            store.record_audit(
                actor=data["student_id"],
                action=(
                    f"Registered for exam {data['exam_id']} "
                    f"({data['status']}, {data['amount']}), ticket {data['ticket_ref']}"
                ),
            )
        elif event.event_type == EventType.AUDIT:
            store.record_audit(actor=event.data["actor"], action=event.data["action"])

    return record
