"""Exceptions for the registration engine."""

from examportal.registration.models import ReasonCode


class RegistrationError(Exception):
    """Base exception for registration failures reported to the caller."""

    code: ReasonCode = ReasonCode.STORAGE_UNAVAILABLE

    def __init__(self, message: str = "", detail: dict[str, object] | None = None) -> None:
        super().__init__(message or self.code.value)
        self.detail = detail


class ExamNotOpenError(RegistrationError):
    """Exam is missing or its date has passed."""

    code = ReasonCode.EXAM_NOT_OPEN


class AmountMismatchError(RegistrationError):
    """Paid amount differs from the exam fee."""

    code = ReasonCode.AMOUNT_MISMATCH


class InsufficientAttendanceError(RegistrationError):
    """Attendance is below the exam's minimum."""

    code = ReasonCode.INSUFFICIENT_ATTENDANCE


class AlreadyRegisteredError(RegistrationError):
    """A ledger entry already exists for the student and exam."""

    code = ReasonCode.ALREADY_REGISTERED


class TransactionTimeoutError(RegistrationError):
    """The unit of work did not finish before its deadline."""

    code = ReasonCode.TRANSACTION_TIMEOUT


class StorageUnavailableError(RegistrationError):
    """The database could not be used."""

    code = ReasonCode.STORAGE_UNAVAILABLE


class IssuerError(Exception):
    """Hall ticket issued without a ledger entry in the same unit of work."""


class RegistrationProcessingError(Exception):
    """Unexpected error while processing a registration."""


class RegistrationNotFoundError(Exception):
    """No registration exists for the student and exam."""
