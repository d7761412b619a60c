"""Data models for the registration engine."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from examportal.store import Exam


class ReasonCode(StrEnum):
    """Stable outcome codes reported to callers."""

    OK = "OK"
    EXAM_NOT_OPEN = "EXAM_NOT_OPEN"
    AMOUNT_MISMATCH = "AMOUNT_MISMATCH"
    INSUFFICIENT_ATTENDANCE = "INSUFFICIENT_ATTENDANCE"
    ALREADY_REGISTERED = "ALREADY_REGISTERED"
    TRANSACTION_TIMEOUT = "TRANSACTION_TIMEOUT"
    STORAGE_UNAVAILABLE = "STORAGE_UNAVAILABLE"


REASON_MESSAGES: dict[ReasonCode, str] = {
    ReasonCode.OK: "Exam registered and payment processed successfully",
    ReasonCode.EXAM_NOT_OPEN: "Exam not found or registration closed",
    ReasonCode.AMOUNT_MISMATCH: "Invalid payment amount",
    ReasonCode.INSUFFICIENT_ATTENDANCE: "Insufficient attendance",
    ReasonCode.ALREADY_REGISTERED: "Already registered for this exam",
    ReasonCode.TRANSACTION_TIMEOUT: "Registration timed out, please retry",
    ReasonCode.STORAGE_UNAVAILABLE: "Service temporarily unavailable, please try again",
}

RETRYABLE_CODES = frozenset({ReasonCode.TRANSACTION_TIMEOUT, ReasonCode.STORAGE_UNAVAILABLE})


@dataclass(frozen=True)
class EligibilityDecision:
    """Outcome of an eligibility check.

    Attributes:
        eligible: Whether the student may register.
        reason: Why not, when ineligible.
        attendance: Measured attendance percentage (0.0 without a record).
        required: The exam's minimum attendance, when the exam was found.
    """

    eligible: bool
    reason: ReasonCode | None = None
    attendance: float | None = None
    required: float | None = None

    @classmethod
    def allow(cls, attendance: float, required: float) -> EligibilityDecision:
        return cls(eligible=True, attendance=attendance, required=required)

    @classmethod
    def deny(
        cls,
        reason: ReasonCode,
        attendance: float | None = None,
        required: float | None = None,
    ) -> EligibilityDecision:
        return cls(eligible=False, reason=reason, attendance=attendance, required=required)


@dataclass(frozen=True)
class RegistrationResult:
    """Outcome of one registration attempt.

    Attributes:
        success: True only when the ledger entry and hall ticket were committed.
        code: Stable reason code.
        message: User-facing message for the code.
        ticket_ref: Hall ticket reference on success.
        detail: Extra diagnostics, e.g. the measured attendance.
    """

    success: bool
    code: ReasonCode
    message: str
    ticket_ref: str | None = None
    detail: dict[str, object] | None = None

    @property
    def retryable(self) -> bool:
        """Whether the caller may retry the same request unchanged."""
        return self.code in RETRYABLE_CODES

    @classmethod
    def ok(cls, ticket_ref: str) -> RegistrationResult:
        return cls(
            success=True,
            code=ReasonCode.OK,
            message=REASON_MESSAGES[ReasonCode.OK],
            ticket_ref=ticket_ref,
        )

    @classmethod
    def failed(
        cls, code: ReasonCode, detail: dict[str, object] | None = None
    ) -> RegistrationResult:
        return cls(success=False, code=code, message=REASON_MESSAGES[code], detail=detail)


@dataclass
class AvailableExam:
    """An upcoming exam as seen by one student."""

    exam: Exam
    attendance: float
    eligible: bool
    registered: bool
