"""Unit tests for EventManager and events."""

import asyncio
import json
from unittest.mock import MagicMock

import pytest

from examportal.api.events import Event, EventManager, EventType, audit_listener


@pytest.fixture
def event_manager() -> EventManager:
    """Create an EventManager instance."""
    return EventManager()


@pytest.mark.unit
class TestEventManagerSubscribe:
    """Tests for subscribe and unsubscribe."""

    def test_subscribe_with_student_filter(self, event_manager: EventManager) -> None:
        """Client can subscribe with a student filter."""
        subscriber = event_manager.subscribe(student_id="student-1")

        assert subscriber.student_id == "student-1"
        assert event_manager.subscriber_count == 1

    def test_unsubscribe(self, event_manager: EventManager) -> None:
        """Client can unsubscribe; unknown IDs are ignored."""
        subscriber = event_manager.subscribe()

        event_manager.unsubscribe(subscriber.id)
        event_manager.unsubscribe("nonexistent-id")

        assert event_manager.subscriber_count == 0


@pytest.mark.unit
class TestEventManagerEmit:
    """Tests for emit_sync and the convenience emitters."""

    @pytest.mark.asyncio
    async def test_emit_filters_by_student(self, event_manager: EventManager) -> None:
        """Filtered subscribers only get their student's events."""
        everyone = event_manager.subscribe()
        mine = event_manager.subscribe(student_id="s1")
        theirs = event_manager.subscribe(student_id="s2")

        event_manager.emit_registration_completed(
            student_id="s1", exam_id="e1", ticket_ref="ref", amount="50.00", status="paid"
        )

        got_all = await asyncio.wait_for(everyone.queue.get(), timeout=1.0)
        got_mine = await asyncio.wait_for(mine.queue.get(), timeout=1.0)

        assert got_all.event_type == EventType.REGISTRATION_COMPLETED
        assert got_mine.data["ticket_ref"] == "ref"
        assert theirs.queue.empty()

    @pytest.mark.asyncio
    async def test_emit_from_worker_thread(self, event_manager: EventManager) -> None:
        """Events emitted off the loop thread still reach subscribers."""
        subscriber = event_manager.subscribe()

        await asyncio.to_thread(event_manager.emit_audit, "admin", "Added course")

        event = await asyncio.wait_for(subscriber.queue.get(), timeout=1.0)
        assert event.data["action"] == "Added course"

    def test_listener_called(self, event_manager: EventManager) -> None:
        """Listeners see every event."""
        listener = MagicMock()
        event_manager.add_listener(listener)

        event_manager.emit_audit("admin", "Added student")

        event = listener.call_args.args[0]
        assert event.event_type == EventType.AUDIT
        assert event.data["actor"] == "admin"

    def test_listener_failure_is_contained(self, event_manager: EventManager) -> None:
        """A failing listener does not stop later listeners."""
        failing = MagicMock(side_effect=RuntimeError("boom"))
        after = MagicMock()
        event_manager.add_listener(failing)
        event_manager.add_listener(after)

        event_manager.emit_audit("admin", "Added student")

        after.assert_called_once()


@pytest.mark.unit
class TestEventSerialization:
    """Tests for SSE formatting."""

    def test_to_sse(self) -> None:
        """Event renders as an SSE frame with JSON data."""
        event = Event(event_type=EventType.AUDIT, data={"actor": "admin"})

        sse = event.to_sse()

        assert sse.startswith("event: audit\n")
        assert sse.endswith("\n\n")
        assert json.loads(sse.split("data: ", 1)[1]) == {"actor": "admin"}

    def test_heartbeat_has_timestamp(self, event_manager: EventManager) -> None:
        """Heartbeat carries a UTC timestamp."""
        heartbeat = event_manager.create_heartbeat_event()

        assert heartbeat.event_type == EventType.HEARTBEAT
        assert heartbeat.data["timestamp"].endswith("Z")


@pytest.mark.unit
class TestAuditListener:
    """Tests for audit_listener."""

    def test_registration_written_to_audit_log(self, event_manager: EventManager) -> None:
        """Completed registrations are recorded with the student as actor."""
        store = MagicMock()
        event_manager.add_listener(audit_listener(store))

        event_manager.emit_registration_completed(
            student_id="s1", exam_id="e1", ticket_ref="ref", amount="50.00", status="paid"
        )

        kwargs = store.record_audit.call_args.kwargs
        assert kwargs["actor"] == "s1"
        assert "e1" in kwargs["action"]
        assert "ref" in kwargs["action"]

    def test_audit_event_written(self, event_manager: EventManager) -> None:
        """Catalog audit events are recorded as given."""
        store = MagicMock()
        event_manager.add_listener(audit_listener(store))

        event_manager.emit_audit("registrar", "Created exam: Databases Final")

        store.record_audit.assert_called_once_with(
            actor="registrar", action="Created exam: Databases Final"
        )

    def test_heartbeat_not_written(self) -> None:
        """Heartbeats are not audited."""
        store = MagicMock()
        listener = audit_listener(store)

        listener(EventManager().create_heartbeat_event())

        store.record_audit.assert_not_called()
