"""Registration engine - eligibility, ledger, hall tickets and the coordinator."""

from examportal.registration.coordinator import RegistrationCoordinator
from examportal.registration.eligibility import EligibilityEvaluator
from examportal.registration.exceptions import (
    AlreadyRegisteredError,
    AmountMismatchError,
    ExamNotOpenError,
    InsufficientAttendanceError,
    IssuerError,
    RegistrationError,
    RegistrationNotFoundError,
    RegistrationProcessingError,
    StorageUnavailableError,
    TransactionTimeoutError,
)
from examportal.registration.issuer import HallTicketIssuer
from examportal.registration.ledger import RegistrationLedger
from examportal.registration.models import (
    REASON_MESSAGES,
    AvailableExam,
    EligibilityDecision,
    ReasonCode,
    RegistrationResult,
)

__all__ = [
    "REASON_MESSAGES",
    "AlreadyRegisteredError",
    "AmountMismatchError",
    "AvailableExam",
    "EligibilityDecision",
    "EligibilityEvaluator",
    "ExamNotOpenError",
    "HallTicketIssuer",
    "InsufficientAttendanceError",
    "IssuerError",
    "ReasonCode",
    "RegistrationCoordinator",
    "RegistrationError",
    "RegistrationLedger",
    "RegistrationNotFoundError",
    "RegistrationProcessingError",
    "RegistrationResult",
    "StorageUnavailableError",
    "TransactionTimeoutError",
]
