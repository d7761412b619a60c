"""Pydantic models for REST API."""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from examportal.store import NotificationAudience

T = TypeVar("T")


class APIResponse(BaseModel, Generic[T]):
    """Standard API response wrapper."""

    data: T | None = None
    error: str | None = None


# Student models


class StudentCreate(BaseModel):
    """Request model for creating a student."""

    student_number: str = Field(..., min_length=1, max_length=50)
    name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., max_length=255, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class StudentUpdate(BaseModel):
    """Request model for updating a student. Omitted fields are kept."""

    student_number: str | None = Field(default=None, min_length=1, max_length=50)
    name: str | None = Field(default=None, min_length=1, max_length=255)
    email: str | None = Field(
        default=None, max_length=255, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$"
    )


class StudentResponse(BaseModel):
    """Response model for a student."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    student_number: str
    name: str
    email: str
    created_at: datetime


def student_to_response(student: Any) -> StudentResponse:
    """Convert a Student model to StudentResponse."""
    return StudentResponse.model_validate(student)


class AttendanceUpdate(BaseModel):
    """Request model for setting an attendance percentage."""

    percentage: float = Field(..., ge=0, le=100)


class AttendanceResponse(BaseModel):
    """Response model for an attendance record."""

    course_id: str
    course_name: str | None = None
    percentage: float


def attendance_to_response(record: Any) -> AttendanceResponse:
    """Convert an AttendanceRecord model to AttendanceResponse."""
    return AttendanceResponse(
        course_id=record.course_id,
        course_name=record.course.name,
        percentage=record.percentage,
    )


# Course models


class CourseCreate(BaseModel):
    """Request model for creating a course."""

    name: str = Field(..., min_length=1, max_length=255)
    code: str = Field(..., min_length=1, max_length=50)


class CourseResponse(BaseModel):
    """Response model for a course."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    code: str


def course_to_response(course: Any) -> CourseResponse:
    """Convert a Course model to CourseResponse."""
    return CourseResponse.model_validate(course)


# Exam models


class ExamCreate(BaseModel):
    """Request model for scheduling an exam."""

    course_id: str
    title: str = Field(..., min_length=1, max_length=255)
    exam_type: str = Field(default="final", max_length=50)
    exam_date: date
    start_time: str | None = Field(default=None, max_length=20)
    venue: str | None = Field(default=None, max_length=255)
    fee: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    requires_payment: bool = True
    min_attendance: float = Field(default=75.0, ge=0, le=100)


class ExamResponse(BaseModel):
    """Response model for an exam."""

    id: str
    course_id: str
    course_name: str | None
    title: str
    exam_type: str
    exam_date: date
    start_time: str | None
    venue: str | None
    fee: Decimal
    requires_payment: bool
    min_attendance: float


def exam_to_response(exam: Any) -> ExamResponse:
    """Convert an Exam model (course loaded) to ExamResponse."""
    return ExamResponse(
        id=exam.id,
        course_id=exam.course_id,
        course_name=exam.course.name,
        title=exam.title,
        exam_type=exam.exam_type,
        exam_date=exam.exam_date,
        start_time=exam.start_time,
        venue=exam.venue,
        fee=exam.fee,
        requires_payment=exam.requires_payment,
        min_attendance=exam.min_attendance,
    )


class AvailableExamResponse(BaseModel):
    """An upcoming exam with the student's eligibility."""

    exam: ExamResponse
    attendance: float
    eligible: bool
    registered: bool


def available_exam_to_response(available: Any) -> AvailableExamResponse:
    """Convert an AvailableExam to AvailableExamResponse."""
    return AvailableExamResponse(
        exam=exam_to_response(available.exam),
        attendance=available.attendance,
        eligible=available.eligible,
        registered=available.registered,
    )


# Registration models


class RegistrationRequest(BaseModel):
    """Request model for registering for an exam."""

    student_id: str = Field(..., min_length=1)
    exam_id: str = Field(..., min_length=1)
    amount: Decimal


class RegistrationResponse(BaseModel):
    """Outcome of a registration request."""

    success: bool
    code: str
    message: str
    ticket_ref: str | None = None
    detail: dict[str, Any] | None = None


def registration_result_to_response(result: Any) -> RegistrationResponse:
    """Convert a RegistrationResult to RegistrationResponse."""
    return RegistrationResponse(
        success=result.success,
        code=result.code.value,
        message=result.message,
        ticket_ref=result.ticket_ref,
        detail=result.detail,
    )


class PaymentResponse(BaseModel):
    """A ledger entry as shown in payment listings."""

    id: str
    student_id: str
    exam_id: str
    exam_title: str
    amount: Decimal
    status: str
    registered_at: datetime


def payment_to_response(entry: Any) -> PaymentResponse:
    """Convert a RegistrationEntry (exam loaded) to PaymentResponse."""
    return PaymentResponse(
        id=entry.id,
        student_id=entry.student_id,
        exam_id=entry.exam_id,
        exam_title=entry.exam.title,
        amount=entry.amount,
        status=entry.status,
        registered_at=entry.registered_at,
    )


class AdminPaymentResponse(PaymentResponse):
    """A ledger entry with the paying student, for the admin listing."""

    student_name: str
    student_number: str
    student_email: str


def admin_payment_to_response(entry: Any) -> AdminPaymentResponse:
    """Convert a RegistrationEntry (student and exam loaded) to AdminPaymentResponse."""
    return AdminPaymentResponse(
        **payment_to_response(entry).model_dump(),
        student_name=entry.student.name,
        student_number=entry.student.student_number,
        student_email=entry.student.email,
    )


class HallTicketResponse(BaseModel):
    """A hall ticket with its exam schedule."""

    id: str
    student_id: str
    exam_id: str
    exam_title: str
    exam_date: date
    start_time: str | None
    venue: str | None
    reference: str
    issued_at: datetime


def hall_ticket_to_response(ticket: Any) -> HallTicketResponse:
    """Convert a HallTicket (exam loaded) to HallTicketResponse."""
    return HallTicketResponse(
        id=ticket.id,
        student_id=ticket.student_id,
        exam_id=ticket.exam_id,
        exam_title=ticket.exam.title,
        exam_date=ticket.exam.exam_date,
        start_time=ticket.exam.start_time,
        venue=ticket.exam.venue,
        reference=ticket.reference,
        issued_at=ticket.issued_at,
    )


class ConfirmationResponse(BaseModel):
    """Response model for a confirmation re-send."""

    message: str


# Audit models


class AuditLogResponse(BaseModel):
    """Response model for an audit log row."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    actor: str
    action: str
    created_at: datetime


def audit_to_response(entry: Any) -> AuditLogResponse:
    """Convert an AuditLogEntry to AuditLogResponse."""
    return AuditLogResponse.model_validate(entry)


# Notification models


class NotificationCreate(BaseModel):
    """Request model for broadcasting a notification."""

    audience: NotificationAudience = NotificationAudience.ALL
    message: str = Field(..., min_length=1, max_length=5000)


class NotificationResponse(BaseModel):
    """Response model for a stored notification."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    audience: str
    message: str
    sent_at: datetime


def notification_to_response(notification: Any) -> NotificationResponse:
    """Convert a Notification model to NotificationResponse."""
    return NotificationResponse.model_validate(notification)


class BroadcastResponse(BaseModel):
    """A stored notification and how many students it was sent to."""

    notification: NotificationResponse
    recipient_count: int
