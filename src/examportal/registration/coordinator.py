"""Registration Transaction Coordinator - one atomic registration per request."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import joinedload

from examportal.notifications import ConfirmationDetails
from examportal.registration.eligibility import EligibilityEvaluator
from examportal.registration.exceptions import (
    ExamNotOpenError,
    InsufficientAttendanceError,
    RegistrationError,
    RegistrationNotFoundError,
    RegistrationProcessingError,
    StorageUnavailableError,
    TransactionTimeoutError,
)
from examportal.registration.issuer import HallTicketIssuer
from examportal.registration.ledger import RegistrationLedger
from examportal.registration.models import AvailableExam, RegistrationResult
from examportal.store import (
    Exam,
    HallTicket,
    PaymentStatus,
    PortalStoreError,
    RegistrationEntry,
    Student,
    StudentNotFoundError,
)

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

    from examportal.api.events import EventManager
    from examportal.notifications import ConfirmationNotifier, DispatchResult
    from examportal.store import Database

logger = logging.getLogger(__name__)


@dataclass
class _Committed:
    """What a committed unit of work hands to the post-commit phase."""

    student_id: str
    exam_id: str
    amount: Decimal
    status: PaymentStatus
    ticket_ref: str
    student_name: str
    student_email: str
    exam_title: str


class RegistrationCoordinator:
    """Registers students for exams atomically.

    Each call opens its own session on the injected database, takes the
    SQLite write lock, and either commits both the ledger entry and the hall
    ticket or neither. Confirmation mail and the audit event happen only
    after the commit and cannot undo it.
    """

    def __init__(
        self,
        database: Database,
        notifier: ConfirmationNotifier | None = None,
        event_manager: EventManager | None = None,
        evaluator: EligibilityEvaluator | None = None,
        ledger: RegistrationLedger | None = None,
        issuer: HallTicketIssuer | None = None,
        timeout: float = 10.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the coordinator.

        Args:
            database: Database providing per-call sessions.
            notifier: Sends confirmation mail after commit (None = no mail).
            event_manager: Receives a registration_completed event after commit.
            evaluator: Eligibility evaluator.
            ledger: Registration ledger.
            issuer: Hall ticket issuer.
            timeout: Default deadline in seconds for one unit of work.
            clock: Monotonic clock used for deadlines.
        """
        self.database = database
        self.notifier = notifier
        self.event_manager = event_manager
        self.evaluator = evaluator or EligibilityEvaluator()
        self.ledger = ledger or RegistrationLedger()
        self.issuer = issuer or HallTicketIssuer()
        self.timeout = timeout
        self._clock = clock

    def register_for_exam(
        self,
        student_id: str,
        exam_id: str,
        amount: Decimal,
        timeout: float | None = None,
    ) -> RegistrationResult:
        """Register a student for an exam and issue the hall ticket.

        Args:
            student_id: Authenticated student's ID.
            exam_id: The exam's unique ID.
            amount: Amount paid; must equal the exam fee.
            timeout: Deadline in seconds, defaults to the coordinator's.

        Returns:
            RegistrationResult with OK and the ticket reference, or the
            failure code. Failures are never retried here.

        Raises:
            StudentNotFoundError: If the student does not exist.
            RegistrationProcessingError: On unexpected, non-storage errors.
        """
        deadline = self._clock() + (self.timeout if timeout is None else timeout)

        try:
            committed = self._run_unit_of_work(student_id, exam_id, Decimal(str(amount)), deadline)
        except RegistrationError as e:
            logger.info(
                "Registration of student %s for exam %s rejected: %s",
                student_id,
                exam_id,
                e.code.value,
            )
            return RegistrationResult.failed(e.code, e.detail)
        except OperationalError as e:
            if _is_lock_timeout(e):
                logger.warning("Registration for exam %s timed out waiting for lock", exam_id)
                return RegistrationResult.failed(TransactionTimeoutError.code)
            logger.exception("Storage error registering for exam %s: %s", exam_id, e)
            return RegistrationResult.failed(StorageUnavailableError.code)
        except SQLAlchemyError as e:
            logger.exception("Storage error registering for exam %s: %s", exam_id, e)
            return RegistrationResult.failed(StorageUnavailableError.code)
        except PortalStoreError:
            raise
        except Exception as e:
            logger.exception("Error registering student %s for exam %s: %s", student_id, exam_id, e)
            raise RegistrationProcessingError(f"Failed to process registration: {e}") from e

        logger.info(
            "Student %s registered for exam %s (%s), ticket %s",
            student_id,
            exam_id,
            committed.status.value,
            committed.ticket_ref,
        )
        self._after_commit(committed)
        return RegistrationResult.ok(committed.ticket_ref)

    def _run_unit_of_work(
        self,
        student_id: str,
        exam_id: str,
        amount: Decimal,
        deadline: float,
    ) -> _Committed:
        session = self.database.begin_write_session()
        try:
            committed = self._register(session, student_id, exam_id, amount, deadline)
            self._check_deadline(deadline)
            session.commit()
            return committed
        except BaseException:
            session.rollback()
            raise
        finally:
            session.close()

    def _register(
        self,
        session: Session,
        student_id: str,
        exam_id: str,
        amount: Decimal,
        deadline: float,
    ) -> _Committed:
        exam = session.get(Exam, exam_id)
        if exam is None or not self.evaluator.is_open(exam):
            raise ExamNotOpenError(f"Exam '{exam_id}' not found or registration closed")

        student = session.get(Student, student_id)
        if student is None:
            raise StudentNotFoundError(f"Student with id '{student_id}' not found")

        self.ledger.check_amount(exam, amount)

        decision = self.evaluator.assess(session, student_id, exam)
        if not decision.eligible:
            raise InsufficientAttendanceError(
                f"Attendance {decision.attendance}% below required {decision.required}%",
                detail={"attendance": decision.attendance, "required": decision.required},
            )
        self._check_deadline(deadline)

        status = self.ledger.status_for(exam)
        entry = self.ledger.register(session, student_id, exam_id, amount, status)
        ticket = self.issuer.issue(session, entry)

        return _Committed(
            student_id=student_id,
            exam_id=exam_id,
            amount=amount,
            status=status,
            ticket_ref=ticket.reference,
            student_name=student.name,
            student_email=student.email,
            exam_title=exam.title,
        )

    def _check_deadline(self, deadline: float) -> None:
        if self._clock() > deadline:
            raise TransactionTimeoutError("Registration did not complete before its deadline")

    def _after_commit(self, committed: _Committed) -> None:
        if self.notifier is not None:
            try:
                self.notifier.notify(_confirmation_details(committed))
            except Exception as e:
                logger.exception("Could not start confirmation for %s: %s", committed.ticket_ref, e)

        if self.event_manager is not None:
            try:
                self.event_manager.emit_registration_completed(
                    student_id=committed.student_id,
                    exam_id=committed.exam_id,
                    ticket_ref=committed.ticket_ref,
                    amount=f"{committed.amount:.2f}",
                    status=committed.status.value,
                )
            except Exception as e:
                logger.exception("Could not emit event for %s: %s", committed.ticket_ref, e)

    def resend_confirmation(self, student_id: str, exam_id: str) -> DispatchResult:
        """Send the confirmation mail again for a paid registration.

        Raises:
            RegistrationNotFoundError: If there is no paid registration.
            DispatchFailedError: If the dispatcher rejects the message.
        """
        if self.notifier is None:
            raise RegistrationProcessingError("No notifier configured")

        session = self.database.get_session()
        try:
            stmt = (
                select(RegistrationEntry, HallTicket, Student, Exam)
                .join(HallTicket, HallTicket.registration_id == RegistrationEntry.id)
                .join(Student, Student.id == RegistrationEntry.student_id)
                .join(Exam, Exam.id == RegistrationEntry.exam_id)
                .where(
                    RegistrationEntry.student_id == student_id,
                    RegistrationEntry.exam_id == exam_id,
                    RegistrationEntry.status == PaymentStatus.PAID.value,
                )
            )
            row = session.execute(stmt).one_or_none()
        finally:
            session.close()

        if row is None:
            raise RegistrationNotFoundError(
                f"No paid registration for student '{student_id}' and exam '{exam_id}'"
            )

        entry, ticket, student, exam = row
        details = ConfirmationDetails(
            recipient_email=student.email,
            student_name=student.name,
            exam_title=exam.title,
            amount=f"{Decimal(entry.amount):.2f}",
            ticket_ref=ticket.reference,
            status=entry.status,
        )
        return self.notifier.send_confirmation(details)

    def list_available_exams(self, student_id: str) -> list[AvailableExam]:
        """Upcoming exams with the student's attendance and eligibility.

        An exam is eligible when attendance meets its minimum and the student
        has not registered for it yet.

        Raises:
            StudentNotFoundError: If the student does not exist.
        """
        session = self.database.get_session()
        try:
            if session.get(Student, student_id) is None:
                raise StudentNotFoundError(f"Student with id '{student_id}' not found")

            exams = [exam for exam in _all_exams(session) if self.evaluator.is_open(exam)]
            registered = set(
                session.execute(
                    select(RegistrationEntry.exam_id).where(
                        RegistrationEntry.student_id == student_id
                    )
                ).scalars()
            )

            available = []
            for exam in exams:
                decision = self.evaluator.assess(session, student_id, exam)
                is_registered = exam.id in registered
                available.append(
                    AvailableExam(
                        exam=exam,
                        attendance=decision.attendance or 0.0,
                        eligible=decision.eligible and not is_registered,
                        registered=is_registered,
                    )
                )
            return available
        finally:
            session.close()


def _all_exams(session: Session) -> list[Exam]:
    stmt = select(Exam).options(joinedload(Exam.course)).order_by(Exam.exam_date, Exam.title)
    return list(session.execute(stmt).scalars().all())


def _confirmation_details(committed: _Committed) -> ConfirmationDetails:
    return ConfirmationDetails(
        recipient_email=committed.student_email,
        student_name=committed.student_name,
        exam_title=committed.exam_title,
        amount=f"{committed.amount:.2f}",
        ticket_ref=committed.ticket_ref,
        status=committed.status.value,
    )


def _is_lock_timeout(error: OperationalError) -> bool:
    return "database is locked" in str(error.orig)
