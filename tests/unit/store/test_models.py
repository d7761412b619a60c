"""Unit tests for portal store models."""

from datetime import date
from decimal import Decimal

from examportal.store.models import (
    AuditLogEntry,
    Exam,
    Notification,
    NotificationAudience,
    PaymentStatus,
    RegistrationEntry,
    Student,
)


class TestPaymentStatusEnum:
    """Tests for PaymentStatus enum."""

    def test_payment_status_values(self) -> None:
        """Both statuses exist (PAID, FREE)."""
        assert PaymentStatus.PAID.value == "paid"
        assert PaymentStatus.FREE.value == "free"
        assert len(PaymentStatus) == 2

    def test_payment_status_is_string(self) -> None:
        """PaymentStatus compares equal to its string value."""
        assert PaymentStatus.PAID == "paid"


class TestExamModel:
    """Tests for Exam model."""

    def test_exam_defaults(self) -> None:
        """exam_type defaults to final, payment required, 75% attendance."""
        exam = Exam(course_id="c1", title="Final", exam_date=date(2030, 1, 1), fee=Decimal("10"))

        assert exam.exam_type == "final"
        assert exam.requires_payment is True
        assert exam.min_attendance == 75.0
        assert exam.start_time is None
        assert exam.venue is None

    def test_exam_generates_id(self) -> None:
        """Each exam gets a distinct generated ID."""
        a = Exam(course_id="c1", title="A", exam_date=date(2030, 1, 1), fee=Decimal("10"))
        b = Exam(course_id="c1", title="B", exam_date=date(2030, 1, 1), fee=Decimal("10"))

        assert a.id != b.id
        assert len(a.id) == 36


class TestRegistrationEntryModel:
    """Tests for RegistrationEntry model."""

    def test_payment_status_property(self) -> None:
        """payment_status returns the enum for the stored string."""
        entry = RegistrationEntry(
            student_id="s1", exam_id="e1", amount=Decimal("50.00"), status="free"
        )

        assert entry.payment_status == PaymentStatus.FREE

    def test_repr(self) -> None:
        """repr includes the (student, exam) pair."""
        entry = RegistrationEntry(
            student_id="s1", exam_id="e1", amount=Decimal("50.00"), status="paid"
        )

        assert "s1" in repr(entry)
        assert "e1" in repr(entry)


class TestOtherModels:
    """Tests for Student and AuditLogEntry models."""

    def test_student_explicit_id(self) -> None:
        """An explicit ID is kept."""
        student = Student(student_number="S1", name="A", email="a@b.c", id="fixed")
        assert student.id == "fixed"

    def test_audit_repr(self) -> None:
        """repr includes actor and action."""
        entry = AuditLogEntry(actor="admin", action="Added course")
        assert "admin" in repr(entry)
        assert "Added course" in repr(entry)

    def test_notification_audience_property(self) -> None:
        """audience is exposed as NotificationAudience enum."""
        notification = Notification(audience="unpaid", message="Fees are due")
        assert notification.notification_audience == NotificationAudience.UNPAID
        assert "unpaid" in repr(notification)
