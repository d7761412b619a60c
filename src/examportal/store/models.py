"""SQLAlchemy models for the portal store."""

from __future__ import annotations

import uuid
from datetime import date, datetime  # noqa: TC003 - used at runtime for SQLAlchemy
from decimal import Decimal  # noqa: TC003 - used at runtime for SQLAlchemy
from enum import StrEnum
from typing import Any

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import (
    DeclarativeBase,
    Mapped,
    mapped_column,
    relationship,
)


class PaymentStatus(StrEnum):
    """Payment status recorded on a registration entry."""

    PAID = "paid"
    FREE = "free"


class NotificationAudience(StrEnum):
    """Which students a broadcast notification is meant for.

    PAID means students holding at least one paid registration, UNPAID
    everyone else.
    """

    ALL = "all"
    PAID = "paid"
    UNPAID = "unpaid"


def generate_uuid() -> str:
    """Generate a new UUID string."""
    return str(uuid.uuid4())


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class Student(Base):
    """Student model - identity data owned by the identity subsystem."""

    __tablename__ = "students"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    student_number: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )

    def __init__(
        self,
        student_number: str,
        name: str,
        email: str,
        id: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.student_number = student_number
        self.name = name
        self.email = email

    def __repr__(self) -> str:
        return f"<Student(id={self.id!r}, student_number={self.student_number!r})>"


class Course(Base):
    """Course model."""

    __tablename__ = "courses"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    code: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )

    exams: Mapped[list[Exam]] = relationship("Exam", back_populates="course")

    def __init__(self, name: str, code: str, id: str | None = None, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.name = name
        self.code = code

    def __repr__(self) -> str:
        return f"<Course(id={self.id!r}, code={self.code!r})>"


class Exam(Base):
    """Exam model - read-only input to a registration attempt."""

    __tablename__ = "exams"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    course_id: Mapped[str] = mapped_column(String(36), ForeignKey("courses.id"), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    exam_type: Mapped[str] = mapped_column(String(50), nullable=False)
    exam_date: Mapped[date] = mapped_column(Date, nullable=False)
    start_time: Mapped[str | None] = mapped_column(String(20), nullable=True)
    venue: Mapped[str | None] = mapped_column(String(255), nullable=True)
    fee: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    requires_payment: Mapped[bool] = mapped_column(Boolean, nullable=False)
    min_attendance: Mapped[float] = mapped_column(Float, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )

    course: Mapped[Course] = relationship("Course", back_populates="exams")

    def __init__(
        self,
        course_id: str,
        title: str,
        exam_date: date,
        fee: Decimal,
        id: str | None = None,
        exam_type: str = "final",
        start_time: str | None = None,
        venue: str | None = None,
        requires_payment: bool = True,
        min_attendance: float = 75.0,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.course_id = course_id
        self.title = title
        self.exam_type = exam_type
        self.exam_date = exam_date
        self.start_time = start_time
        self.venue = venue
        self.fee = fee
        self.requires_payment = requires_payment
        self.min_attendance = min_attendance

    def __repr__(self) -> str:
        return f"<Exam(id={self.id!r}, title={self.title!r}, exam_date={self.exam_date!r})>"


class AttendanceRecord(Base):
    """Attendance percentage of a student in a course."""

    __tablename__ = "attendance"
    __table_args__ = (UniqueConstraint("student_id", "course_id", name="uq_attendance_pair"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    student_id: Mapped[str] = mapped_column(String(36), ForeignKey("students.id"), nullable=False)
    course_id: Mapped[str] = mapped_column(String(36), ForeignKey("courses.id"), nullable=False)
    percentage: Mapped[float] = mapped_column(Float, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now(), onupdate=func.now()
    )

    course: Mapped[Course] = relationship("Course")

    def __init__(
        self,
        student_id: str,
        course_id: str,
        percentage: float,
        id: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.student_id = student_id
        self.course_id = course_id
        self.percentage = percentage

    def __repr__(self) -> str:
        return (
            f"<AttendanceRecord(student_id={self.student_id!r}, "
            f"course_id={self.course_id!r}, percentage={self.percentage!r})>"
        )


class RegistrationEntry(Base):
    """Ledger row - one per (student, exam), ever."""

    __tablename__ = "registration_entries"
    __table_args__ = (UniqueConstraint("student_id", "exam_id", name="uq_registration_pair"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    student_id: Mapped[str] = mapped_column(String(36), ForeignKey("students.id"), nullable=False)
    exam_id: Mapped[str] = mapped_column(String(36), ForeignKey("exams.id"), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    status: Mapped[str] = mapped_column(String(10), nullable=False)
    registered_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )

    student: Mapped[Student] = relationship("Student")
    exam: Mapped[Exam] = relationship("Exam")
    hall_ticket: Mapped[HallTicket | None] = relationship(
        "HallTicket", back_populates="registration", uselist=False
    )

    def __init__(
        self,
        student_id: str,
        exam_id: str,
        amount: Decimal,
        status: str,
        id: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.student_id = student_id
        self.exam_id = exam_id
        self.amount = amount
        self.status = status

    @property
    def payment_status(self) -> PaymentStatus:
        """Get status as PaymentStatus enum."""
        return PaymentStatus(self.status)

    def __repr__(self) -> str:
        return (
            f"<RegistrationEntry(student_id={self.student_id!r}, "
            f"exam_id={self.exam_id!r}, status={self.status!r})>"
        )


class HallTicket(Base):
    """Proof of registration, paired one-to-one with a ledger row."""

    __tablename__ = "hall_tickets"
    __table_args__ = (UniqueConstraint("student_id", "exam_id", name="uq_hall_ticket_pair"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    registration_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("registration_entries.id"), nullable=False, unique=True
    )
    student_id: Mapped[str] = mapped_column(String(36), ForeignKey("students.id"), nullable=False)
    exam_id: Mapped[str] = mapped_column(String(36), ForeignKey("exams.id"), nullable=False)
    reference: Mapped[str] = mapped_column(String(500), nullable=False)
    issued_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )

    registration: Mapped[RegistrationEntry] = relationship(
        "RegistrationEntry", back_populates="hall_ticket"
    )
    exam: Mapped[Exam] = relationship("Exam")

    def __init__(
        self,
        registration_id: str,
        student_id: str,
        exam_id: str,
        reference: str,
        id: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.registration_id = registration_id
        self.student_id = student_id
        self.exam_id = exam_id
        self.reference = reference

    def __repr__(self) -> str:
        return f"<HallTicket(id={self.id!r}, reference={self.reference!r})>"


class AuditLogEntry(Base):
    """Audit trail row, written by the audit event listener."""

    __tablename__ = "audit_log"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    actor: Mapped[str] = mapped_column(String(255), nullable=False)
    action: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )

    def __init__(self, actor: str, action: str, id: str | None = None, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.actor = actor
        self.action = action

    def __repr__(self) -> str:
        return f"<AuditLogEntry(actor={self.actor!r}, action={self.action!r})>"


class Notification(Base):
    """A message broadcast to an audience of students."""

    __tablename__ = "notifications"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    audience: Mapped[str] = mapped_column(String(10), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    sent_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, server_default=func.now())

    def __init__(self, audience: str, message: str, id: str | None = None, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.audience = audience
        self.message = message

    @property
    def notification_audience(self) -> NotificationAudience:
        """Get audience as NotificationAudience enum."""
        return NotificationAudience(self.audience)

    def __repr__(self) -> str:
        return f"<Notification(id={self.id!r}, audience={self.audience!r})>"
