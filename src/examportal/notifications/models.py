"""Data models for notifications."""

from dataclasses import dataclass


@dataclass
class DispatchResult:
    """Result of handing a message to a dispatcher.

    Attributes:
        ok: Whether the message was accepted for delivery.
        error: Error description when not accepted.
    """

    ok: bool
    error: str | None = None


@dataclass
class ConfirmationDetails:
    """What a registration confirmation mail talks about.

    Attributes:
        recipient_email: Student's address.
        student_name: Student's name for the greeting.
        exam_title: Title of the exam registered for.
        amount: Amount recorded, formatted with two decimals.
        ticket_ref: Hall ticket reference.
        status: Payment status of the registration, "paid" or "free".
    """

    recipient_email: str
    student_name: str
    exam_title: str
    amount: str
    ticket_ref: str
    status: str = "paid"

    @property
    def is_free(self) -> bool:
        return self.status == "free"
