"""Unit tests for RegistrationLedger and HallTicketIssuer."""

from decimal import Decimal

import pytest
from sqlalchemy import func, select

from examportal.registration import (
    AlreadyRegisteredError,
    AmountMismatchError,
    HallTicketIssuer,
    IssuerError,
    ReasonCode,
    RegistrationLedger,
)
from examportal.store import (
    Exam,
    HallTicket,
    PaymentStatus,
    PortalStore,
    RegistrationEntry,
    Student,
)


@pytest.fixture
def ledger() -> RegistrationLedger:
    """Create a ledger."""
    return RegistrationLedger()


@pytest.mark.unit
class TestCheckAmount:
    """Tests for check_amount."""

    def test_exact_amount_accepted(self, ledger: RegistrationLedger, exam: Exam) -> None:
        """An amount equal to the fee passes."""
        ledger.check_amount(exam, Decimal("50.00"))
        ledger.check_amount(exam, Decimal("50"))

    def test_lower_amount_rejected(self, ledger: RegistrationLedger, exam: Exam) -> None:
        """40.00 against a 50.00 fee is rejected with both values."""
        with pytest.raises(AmountMismatchError) as exc_info:
            ledger.check_amount(exam, Decimal("40.00"))

        assert exc_info.value.code == ReasonCode.AMOUNT_MISMATCH
        assert exc_info.value.detail == {"expected": "50.00", "received": "40.00"}

    def test_overpayment_rejected(self, ledger: RegistrationLedger, exam: Exam) -> None:
        """Paying more than the fee is also a mismatch."""
        with pytest.raises(AmountMismatchError):
            ledger.check_amount(exam, Decimal("50.01"))


@pytest.mark.unit
class TestStatusFor:
    """Tests for status_for."""

    def test_paid_exam(self, ledger: RegistrationLedger, exam: Exam) -> None:
        """Exams requiring payment record PAID."""
        assert ledger.status_for(exam) == PaymentStatus.PAID

    def test_free_exam(self, ledger: RegistrationLedger, exam: Exam) -> None:
        """Exams without payment record FREE."""
        exam.requires_payment = False
        assert ledger.status_for(exam) == PaymentStatus.FREE


@pytest.mark.unit
class TestRegister:
    """Tests for register."""

    def test_register_inserts_entry(
        self, store: PortalStore, ledger: RegistrationLedger, student: Student, exam: Exam
    ) -> None:
        """The entry is visible after the caller commits."""
        session = store.database.begin_write_session()
        try:
            entry = ledger.register(
                session, student.id, exam.id, Decimal("50.00"), PaymentStatus.PAID
            )
            session.commit()
        finally:
            session.close()

        stored = store.get_registration(student.id, exam.id)
        assert stored is not None
        assert stored.id == entry.id
        assert stored.amount == Decimal("50.00")
        assert stored.payment_status == PaymentStatus.PAID

    def test_duplicate_raises_already_registered(
        self, store: PortalStore, ledger: RegistrationLedger, student: Student, exam: Exam
    ) -> None:
        """A second entry for the pair maps to AlreadyRegisteredError."""
        session = store.database.begin_write_session()
        try:
            ledger.register(session, student.id, exam.id, Decimal("50.00"), PaymentStatus.PAID)
            session.commit()
        finally:
            session.close()

        session = store.database.begin_write_session()
        try:
            with pytest.raises(AlreadyRegisteredError):
                ledger.register(
                    session, student.id, exam.id, Decimal("50.00"), PaymentStatus.PAID
                )
            session.rollback()
        finally:
            session.close()

        assert len(store.list_registrations(student_id=student.id)) == 1

    def test_rollback_discards_entry(
        self, store: PortalStore, ledger: RegistrationLedger, student: Student, exam: Exam
    ) -> None:
        """Nothing persists when the unit of work rolls back."""
        session = store.database.begin_write_session()
        try:
            ledger.register(session, student.id, exam.id, Decimal("50.00"), PaymentStatus.PAID)
            session.rollback()
        finally:
            session.close()

        assert store.get_registration(student.id, exam.id) is None


@pytest.mark.unit
class TestHallTicketIssuer:
    """Tests for HallTicketIssuer."""

    def test_reference_format(self) -> None:
        """Reference is base URL plus student and exam IDs."""
        issuer = HallTicketIssuer("https://portal.example/tickets/")
        assert issuer.reference_for("s1", "e1") == "https://portal.example/tickets/s1_e1.pdf"

    def test_issue_pairs_with_entry(
        self, store: PortalStore, ledger: RegistrationLedger, student: Student, exam: Exam
    ) -> None:
        """The ticket references the entry flushed in the same session."""
        issuer = HallTicketIssuer()
        session = store.database.begin_write_session()
        try:
            entry = ledger.register(
                session, student.id, exam.id, Decimal("50.00"), PaymentStatus.PAID
            )
            ticket = issuer.issue(session, entry)
            session.commit()
        finally:
            session.close()

        assert ticket.registration_id == entry.id
        stored = store.get_hall_ticket(student.id, exam.id)
        assert stored.reference == f"http://localhost:8000/tickets/{student.id}_{exam.id}.pdf"

    def test_issue_without_entry_in_session_raises(
        self, store: PortalStore, student: Student, exam: Exam
    ) -> None:
        """An entry that is not in the session cannot get a ticket."""
        issuer = HallTicketIssuer()
        orphan = RegistrationEntry(
            student_id=student.id, exam_id=exam.id, amount=Decimal("50.00"), status="paid"
        )
        session = store.database.begin_write_session()
        try:
            with pytest.raises(IssuerError):
                issuer.issue(session, orphan)
            session.rollback()
        finally:
            session.close()

        session = store.database.get_session()
        try:
            assert session.execute(select(func.count(HallTicket.id))).scalar_one() == 0
        finally:
            session.close()
