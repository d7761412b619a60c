"""Registration confirmation mail, sent after the registration commits."""

from __future__ import annotations

import html
import logging
import threading
from datetime import date
from typing import TYPE_CHECKING

from examportal.notifications.exceptions import DispatchFailedError

if TYPE_CHECKING:
    from examportal.notifications.dispatcher import NotificationDispatcher
    from examportal.notifications.models import ConfirmationDetails, DispatchResult

logger = logging.getLogger("examportal.notifications")

CONFIRMATION_SUBJECT = "{heading} - {institution} Exam Registration"


class ConfirmationNotifier:
    """Composes and sends registration confirmations.

    ``notify`` is fire-and-forget: it runs the send on a daemon thread (or
    inline when ``background`` is False) and only logs failures. It is never
    retried here.
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

    def compose(self, details: ConfirmationDetails) -> tuple[str, str]:
        """Build the subject and HTML body of a confirmation.

        Free registrations get a registration confirmation without any
        mention of a payment.
        """
        if details.is_free:
            heading = "Registration Confirmation"
            intro = "Your registration for the following exam has been successfully processed:"
            amount_line = "<li><strong>Fee:</strong> none, this exam is free</li>"
            closing = "<p>Please bring your hall ticket to the exam.</p>"
        else:
            heading = "Payment Confirmation"
            intro = (
                "Your registration and payment for the following exam has been "
                "successfully processed:"
            )
            amount_line = f"<li><strong>Amount:</strong> {html.escape(details.amount)}</li>"
            closing = "<p>Thank you for your payment.</p>"

        subject = CONFIRMATION_SUBJECT.format(heading=heading, institution=self.institution)
        body = (
            f"<h2>{heading}</h2>"
            f"<p>Dear {html.escape(details.student_name)},</p>"
            f"<p>{intro}</p>"
            "<ul>"
            f"<li><strong>Exam:</strong> {html.escape(details.exam_title)}</li>"
            f"{amount_line}"
            f"<li><strong>Date:</strong> {date.today().isoformat()}</li>"
            f"<li><strong>Hall ticket:</strong> {html.escape(details.ticket_ref)}</li>"
            "</ul>"
            f"{closing}"
            f"<p>Regards,<br>{html.escape(self.institution)}</p>"
        )
        return subject, body

    def send_confirmation(self, details: ConfirmationDetails) -> DispatchResult:
        """Send a confirmation and wait for the dispatcher's answer.

        Raises:
            DispatchFailedError: If the dispatcher did not accept the message.
        """
        subject, body = self.compose(details)
        result = self.dispatcher.send(details.recipient_email, subject, body)
        if not result.ok:
            raise DispatchFailedError(result.error or "Dispatcher rejected the message")
        return result

    def notify(self, details: ConfirmationDetails) -> threading.Thread | None:
        """Send a confirmation without letting any failure escape.

        Returns:
            The background thread, or None when sent inline.
        """
        if not self.background:
            self._deliver(details)
            return None

        thread = threading.Thread(
            target=self._deliver,
            args=(details,),
            name="confirmation-mail",
            daemon=True,
        )
        thread.start()
        return thread

    def _deliver(self, details: ConfirmationDetails) -> None:
        try:
            self.send_confirmation(details)
        except Exception as e:
            logger.exception("Confirmation mail for ticket %s failed: %s", details.ticket_ref, e)
