"""Portal store - Persistent storage for students, exams, ledger and hall tickets."""

from examportal.store.database import Database
from examportal.store.exceptions import (
    CourseExistsError,
    CourseNotFoundError,
    ExamNotFoundError,
    HallTicketNotFoundError,
    PortalStoreError,
    StudentExistsError,
    StudentInUseError,
    StudentNotFoundError,
)
from examportal.store.models import (
    AttendanceRecord,
    AuditLogEntry,
    Course,
    Exam,
    HallTicket,
    Notification,
    NotificationAudience,
    PaymentStatus,
    RegistrationEntry,
    Student,
)
from examportal.store.store import PortalStore

__all__ = [
    "AttendanceRecord",
    "AuditLogEntry",
    "Course",
    "CourseExistsError",
    "CourseNotFoundError",
    "Database",
    "Exam",
    "ExamNotFoundError",
    "HallTicket",
    "HallTicketNotFoundError",
    "Notification",
    "NotificationAudience",
    "PaymentStatus",
    "PortalStore",
    "PortalStoreError",
    "RegistrationEntry",
    "Student",
    "StudentExistsError",
    "StudentInUseError",
    "StudentNotFoundError",
]
