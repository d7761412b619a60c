"""Notifications - confirmation mail and broadcast notifications."""

from examportal.notifications.broadcaster import NotificationBroadcaster
from examportal.notifications.dispatcher import (
    LogDispatcher,
    MailRelayDispatcher,
    NotificationDispatcher,
)
from examportal.notifications.exceptions import DispatchFailedError, NotificationError
from examportal.notifications.models import ConfirmationDetails, DispatchResult
from examportal.notifications.notifier import ConfirmationNotifier

__all__ = [
    "ConfirmationDetails",
    "ConfirmationNotifier",
    "DispatchFailedError",
    "DispatchResult",
    "LogDispatcher",
    "MailRelayDispatcher",
    "NotificationBroadcaster",
    "NotificationDispatcher",
    "NotificationError",
]
