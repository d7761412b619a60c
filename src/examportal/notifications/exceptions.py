"""Exceptions for notifications."""


class NotificationError(Exception):
    """Base exception for notification errors."""


class DispatchFailedError(NotificationError):
    """A dispatcher reported that it could not send a message."""
