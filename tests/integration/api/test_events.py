"""Integration tests for SSE events endpoint."""

import tempfile
import threading
import time
from pathlib import Path

import httpx
import pytest
import uvicorn

from examportal.api.app import create_app
from examportal.api.dependencies import get_event_manager
from examportal.api.events import EventManager
from examportal.config import Settings


@pytest.fixture
def db_path():
    """Create a temporary database file path."""
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        yield f.name
    # Cleanup
    Path(f.name).unlink(missing_ok=True)
    Path(f"{f.name}-wal").unlink(missing_ok=True)
    Path(f"{f.name}-shm").unlink(missing_ok=True)


@pytest.fixture
def event_manager():
    """Create an EventManager with a short heartbeat."""
    em = EventManager()
    em._heartbeat_interval = 1
    return em


@pytest.fixture
def app(db_path: str, event_manager: EventManager):
    """Create the FastAPI app."""
    app = create_app(settings=Settings(db_path=db_path))

    # Override event manager to use the test instance
    def override_get_event_manager():
        yield event_manager

    app.dependency_overrides[get_event_manager] = override_get_event_manager
    return app


@pytest.fixture
def server(app):
    """Start the app in a background thread."""
    config = uvicorn.Config(app, host="127.0.0.1", port=8765, log_level="error")
    server = uvicorn.Server(config)

    thread = threading.Thread(target=server.run)
    thread.daemon = True
    thread.start()

    # Wait for server to start
    time.sleep(0.5)
    yield "http://127.0.0.1:8765"

    server.should_exit = True
    thread.join(timeout=2)


@pytest.mark.integration
class TestSSEStream:
    """Tests for the SSE stream."""

    def test_sse_connection_opens(self, server: str) -> None:
        """Client can connect to /events/stream."""
        with (
            httpx.Client(timeout=5.0) as client,
            client.stream("GET", f"{server}/api/v1/events/stream") as response,
        ):
            assert response.status_code == 200
            assert response.headers["content-type"] == "text/event-stream; charset=utf-8"

    def test_sse_receives_heartbeat(self, server: str) -> None:
        """Heartbeat received within interval."""
        received_heartbeat = False
        with (
            httpx.Client(timeout=5.0) as client,
            client.stream("GET", f"{server}/api/v1/events/stream") as response,
        ):
            for line in response.iter_lines():
                if "event: heartbeat" in line:
                    received_heartbeat = True
                    break

        assert received_heartbeat

    def test_sse_receives_own_registration(
        self, server: str, event_manager: EventManager
    ) -> None:
        """A student-filtered stream gets that student's registration event."""
        received = []

        def emit_after_delay():
            time.sleep(0.3)
            event_manager.emit_registration_completed(
                student_id="other", exam_id="e0", ticket_ref="r0", amount="1.00", status="paid"
            )
            event_manager.emit_registration_completed(
                student_id="s1", exam_id="e1", ticket_ref="r1", amount="50.00", status="paid"
            )

        emitter = threading.Thread(target=emit_after_delay)
        emitter.start()

        with (
            httpx.Client(timeout=5.0) as client,
            client.stream(
                "GET", f"{server}/api/v1/events/stream", params={"student_id": "s1"}
            ) as response,
        ):
            for line in response.iter_lines():
                if line.startswith("data: ") and "ticket_ref" in line:
                    received.append(line)
                    break

        emitter.join()
        assert len(received) == 1
        assert '"ticket_ref": "r1"' in received[0]
