"""Server-Sent Events (SSE) endpoint."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from fastapi import APIRouter, Query
from fastapi.responses import StreamingResponse

from examportal.api.dependencies import EventManagerDep

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

router = APIRouter(prefix="/events", tags=["events"])


@router.get("/stream")
async def event_stream(
    event_manager: EventManagerDep,
    student_id: str | None = Query(default=None, description="Filter by student ID"),
) -> StreamingResponse:
    """Subscribe to Server-Sent Events stream.

    Events are filtered by student_id if provided, otherwise all events are sent.
    A heartbeat is sent every 30 seconds to keep the connection alive.
    """
    subscriber = event_manager.subscribe(student_id)

    async def generate() -> AsyncGenerator[str, None]:
        try:
            while True:
                try:
                    event = await asyncio.wait_for(
                        subscriber.queue.get(),
                        timeout=event_manager._heartbeat_interval,
                    )
                    yield event.to_sse()
                except TimeoutError:
                    yield event_manager.create_heartbeat_event().to_sse()
        except asyncio.CancelledError:
            # Client disconnected
            pass
        finally:
            event_manager.unsubscribe(subscriber.id)

    return StreamingResponse(
        generate(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",  # Disable nginx buffering
        },
    )
