"""Broadcast notification endpoints."""

from fastapi import APIRouter, Header, status

from examportal.api.dependencies import BroadcasterDep, EventManagerDep, StoreDep
from examportal.api.models import (
    APIResponse,
    BroadcastResponse,
    NotificationCreate,
    NotificationResponse,
    notification_to_response,
)

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=APIResponse[list[NotificationResponse]])
def list_notifications(store: StoreDep) -> APIResponse[list[NotificationResponse]]:
    """List all sent notifications, most recent first."""
    notifications = store.list_notifications()
    return APIResponse(data=[notification_to_response(n) for n in notifications])


@router.post(
    "",
    response_model=APIResponse[BroadcastResponse],
    status_code=status.HTTP_201_CREATED,
)
def send_notification(
    notification: NotificationCreate,
    store: StoreDep,
    broadcaster: BroadcasterDep,
    events: EventManagerDep,
    actor: str = Header(default="admin", alias="X-Actor"),
) -> APIResponse[BroadcastResponse]:
    """Store a notification and mail it to its audience.

    Mail goes out in the background; the response does not wait for it.
    """
    stored = store.create_notification(notification.audience, notification.message)
    recipients = store.list_recipients(notification.audience)
    broadcaster.broadcast([s.email for s in recipients], notification.message)
    events.emit_audit(actor, f"Sent notification to {notification.audience.value} students")
    return APIResponse(
        data=BroadcastResponse(
            notification=notification_to_response(stored),
            recipient_count=len(recipients),
        )
    )
