"""Registration Ledger - one payment record per student and exam."""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy.exc import IntegrityError

from examportal.registration.exceptions import AlreadyRegisteredError, AmountMismatchError
from examportal.store import PaymentStatus, RegistrationEntry

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

    from examportal.store import Exam

logger = logging.getLogger(__name__)

_PAIR_CONSTRAINT_MARKERS = ("uq_registration_pair", "registration_entries.student_id")


class RegistrationLedger:
    """Writes ledger entries inside a caller-owned unit of work.

    Uniqueness of (student, exam) is left to the table's unique constraint;
    the ledger never looks for an existing row first.
    """

    @staticmethod
    def status_for(exam: Exam) -> PaymentStatus:
        """Payment status recorded for registrations to this exam."""
        return PaymentStatus.PAID if exam.requires_payment else PaymentStatus.FREE

    @staticmethod
    def check_amount(exam: Exam, amount: Decimal) -> None:
        """Reject any amount that is not exactly the exam fee.

        Raises:
            AmountMismatchError: If the amounts differ.
        """
        if Decimal(amount) != Decimal(exam.fee):
            raise AmountMismatchError(
                f"Amount {amount} does not match fee {exam.fee} for exam '{exam.id}'",
                detail={"expected": str(exam.fee), "received": str(amount)},
            )

    def register(
        self,
        session: Session,
        student_id: str,
        exam_id: str,
        amount: Decimal,
        status: PaymentStatus,
    ) -> RegistrationEntry:
        """Insert the ledger entry for a student and exam.

        The insert is flushed in a savepoint, so a conflict leaves the outer
        transaction untouched.

        Args:
            session: The unit of work's session.
            student_id: The student's unique ID.
            exam_id: The exam's unique ID.
            amount: Amount charged, already checked against the fee.
            status: Paid or free.

        Returns:
            The flushed RegistrationEntry.

        Raises:
            AlreadyRegisteredError: If an entry for the pair exists.
        """
        entry = RegistrationEntry(
            student_id=student_id,
            exam_id=exam_id,
            amount=amount,
            status=status.value,
        )
        try:
            with session.begin_nested():
                session.add(entry)
        except IntegrityError as e:
            message = str(e.orig)
            if "UNIQUE constraint failed" in message and any(
                marker in message for marker in _PAIR_CONSTRAINT_MARKERS
            ):
                logger.info("Duplicate registration for student %s exam %s", student_id, exam_id)
                raise AlreadyRegisteredError(
                    f"Student '{student_id}' already registered for exam '{exam_id}'"
                ) from e
            raise

        return entry
