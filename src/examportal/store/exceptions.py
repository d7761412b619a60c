"""Custom exceptions for the portal store."""


class PortalStoreError(Exception):
    """Base exception for portal store errors."""


class StudentNotFoundError(PortalStoreError):
    """Student with given ID does not exist."""


class StudentExistsError(PortalStoreError):
    """Student with the same student number or email already exists."""


class CourseNotFoundError(PortalStoreError):
    """Course with given ID does not exist."""


class CourseExistsError(PortalStoreError):
    """Course with the same code already exists."""


class ExamNotFoundError(PortalStoreError):
    """Exam with given ID does not exist."""


class HallTicketNotFoundError(PortalStoreError):
    """No hall ticket exists for the student and exam."""


class StudentInUseError(PortalStoreError):
    """Student has registrations and cannot be deleted."""
