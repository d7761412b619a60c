"""Broadcast notifications - one message to many students."""

from __future__ import annotations

import html
import logging
import threading
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from examportal.notifications.dispatcher import NotificationDispatcher

logger = logging.getLogger("examportal.notifications")

BROADCAST_SUBJECT = "{institution} Exam Portal Notification"


class NotificationBroadcaster:
    """Mails an admin notification to a list of recipients.

    Like ``ConfirmationNotifier.notify`` the fan-out runs on a daemon thread
    (or inline when ``background`` is False). A failed recipient is logged
    and skipped; the rest still get the message.
    """

    def __init__(
        self,
        dispatcher: NotificationDispatcher,
        institution: str = "Exam Registration Office",
        background: bool = True,
    ) -> None:
        self.dispatcher = dispatcher
        self.institution = institution
        self.background = background

    def compose(self, message: str) -> tuple[str, str]:
        """Build the subject and HTML body of a notification."""
        subject = BROADCAST_SUBJECT.format(institution=self.institution)
        paragraphs = html.escape(message).replace("\n", "<br>")
        body = f"<p>{paragraphs}</p><p>Regards,<br>{html.escape(self.institution)}</p>"
        return subject, body

    def broadcast(self, recipients: list[str], message: str) -> threading.Thread | None:
        """Send the message to every recipient without waiting for delivery.

        Returns:
            The background thread, or None when sent inline.
        """
        if not self.background:
            self._deliver(list(recipients), message)
            return None

        thread = threading.Thread(
            target=self._deliver,
            args=(list(recipients), message),
            name="notification-broadcast",
            daemon=True,
        )
        thread.start()
        return thread

    def _deliver(self, recipients: list[str], message: str) -> int:
        subject, body = self.compose(message)
        delivered = 0
        for recipient in recipients:
            try:
                result = self.dispatcher.send(recipient, subject, body)
            except Exception as e:
                logger.exception("Notification dispatch raised: %s", e)
                continue
            if result.ok:
                delivered += 1
            else:
                logger.warning("Notification not accepted: %s", result.error)

        logger.info("Notification delivered to %d of %d students", delivered, len(recipients))
        return delivered
