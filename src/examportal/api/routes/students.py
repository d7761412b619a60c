"""Student endpoints: catalog, attendance and per-student listings."""

from fastapi import APIRouter, Header, Query, status

from examportal.api.dependencies import CoordinatorDep, EventManagerDep, StoreDep
from examportal.api.models import (
    APIResponse,
    AttendanceResponse,
    AttendanceUpdate,
    AvailableExamResponse,
    ExamResponse,
    HallTicketResponse,
    NotificationResponse,
    PaymentResponse,
    StudentCreate,
    StudentResponse,
    StudentUpdate,
    attendance_to_response,
    available_exam_to_response,
    exam_to_response,
    hall_ticket_to_response,
    notification_to_response,
    payment_to_response,
    student_to_response,
)
from examportal.store import PaymentStatus

router = APIRouter(prefix="/students", tags=["students"])


@router.get("", response_model=APIResponse[list[StudentResponse]])
def list_students(store: StoreDep) -> APIResponse[list[StudentResponse]]:
    """List all students."""
    students = store.list_students()
    return APIResponse(data=[student_to_response(s) for s in students])


@router.post(
    "",
    response_model=APIResponse[StudentResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_student(
    student: StudentCreate,
    store: StoreDep,
    events: EventManagerDep,
    actor: str = Header(default="admin", alias="X-Actor"),
) -> APIResponse[StudentResponse]:
    """Add a student."""
    created = store.create_student(
        student_number=student.student_number,
        name=student.name,
        email=student.email,
    )
    events.emit_audit(actor, f"Added student: {created.name} ({created.student_number})")
    return APIResponse(data=student_to_response(created))


@router.get("/{student_id}", response_model=APIResponse[StudentResponse])
def get_student(student_id: str, store: StoreDep) -> APIResponse[StudentResponse]:
    """Get a student by ID."""
    student = store.get_student(student_id)
    return APIResponse(data=student_to_response(student))


@router.put("/{student_id}", response_model=APIResponse[StudentResponse])
def update_student(
    student_id: str,
    update: StudentUpdate,
    store: StoreDep,
    events: EventManagerDep,
    actor: str = Header(default="admin", alias="X-Actor"),
) -> APIResponse[StudentResponse]:
    """Update a student's number, name or email."""
    updated = store.update_student(
        student_id,
        student_number=update.student_number,
        name=update.name,
        email=update.email,
    )
    events.emit_audit(
        actor,
        f"Updated student: {updated.name} ({updated.student_number})",
        student_id=student_id,
    )
    return APIResponse(data=student_to_response(updated))


@router.delete("/{student_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_student(
    student_id: str,
    store: StoreDep,
    events: EventManagerDep,
    actor: str = Header(default="admin", alias="X-Actor"),
) -> None:
    """Delete a student who has no registrations."""
    deleted = store.delete_student(student_id)
    events.emit_audit(actor, f"Deleted student: {deleted.name} ({deleted.student_number})")


@router.get("/{student_id}/attendance", response_model=APIResponse[list[AttendanceResponse]])
def list_attendance(student_id: str, store: StoreDep) -> APIResponse[list[AttendanceResponse]]:
    """List a student's attendance per course."""
    store.get_student(student_id)
    records = store.list_attendance(student_id)
    return APIResponse(data=[attendance_to_response(r) for r in records])


@router.put(
    "/{student_id}/attendance/{course_id}",
    response_model=APIResponse[AttendanceResponse],
)
def set_attendance(
    student_id: str,
    course_id: str,
    update: AttendanceUpdate,
    store: StoreDep,
    events: EventManagerDep,
    actor: str = Header(default="admin", alias="X-Actor"),
) -> APIResponse[AttendanceResponse]:
    """Set a student's attendance percentage for a course."""
    record = store.set_attendance(student_id, course_id, update.percentage)
    events.emit_audit(
        actor,
        f"Set attendance of student {student_id} in course {course_id} to {update.percentage}%",
        student_id=student_id,
    )
    return APIResponse(data=attendance_to_response(record))


@router.get(
    "/{student_id}/exams/available",
    response_model=APIResponse[list[AvailableExamResponse]],
)
def list_available_exams(
    student_id: str, coordinator: CoordinatorDep
) -> APIResponse[list[AvailableExamResponse]]:
    """Upcoming exams with the student's eligibility to register."""
    available = coordinator.list_available_exams(student_id)
    return APIResponse(data=[available_exam_to_response(a) for a in available])


@router.get("/{student_id}/exams/registered", response_model=APIResponse[list[ExamResponse]])
def list_registered_exams(student_id: str, store: StoreDep) -> APIResponse[list[ExamResponse]]:
    """Exams the student has registered for."""
    store.get_student(student_id)
    entries = store.list_registrations(student_id=student_id)
    return APIResponse(data=[exam_to_response(e.exam) for e in entries])


@router.get("/{student_id}/timetable", response_model=APIResponse[list[ExamResponse]])
def get_timetable(student_id: str, store: StoreDep) -> APIResponse[list[ExamResponse]]:
    """Paid exams in date order."""
    store.get_student(student_id)
    entries = store.list_registrations(student_id=student_id, status=PaymentStatus.PAID)
    return APIResponse(data=[exam_to_response(e.exam) for e in entries])


@router.get("/{student_id}/payments", response_model=APIResponse[list[PaymentResponse]])
def list_payments(
    student_id: str,
    store: StoreDep,
    payment_status: str = Query(
        default="all", alias="status", pattern="^(all|paid|free)$", description="Filter"
    ),
) -> APIResponse[list[PaymentResponse]]:
    """The student's payment records."""
    store.get_student(student_id)
    status_filter = None if payment_status == "all" else PaymentStatus(payment_status)
    entries = store.list_registrations(student_id=student_id, status=status_filter)
    return APIResponse(data=[payment_to_response(e) for e in entries])


@router.get("/{student_id}/hall-tickets", response_model=APIResponse[list[HallTicketResponse]])
def list_hall_tickets(student_id: str, store: StoreDep) -> APIResponse[list[HallTicketResponse]]:
    """The student's hall tickets."""
    store.get_student(student_id)
    tickets = store.list_hall_tickets(student_id=student_id)
    return APIResponse(data=[hall_ticket_to_response(t) for t in tickets])


@router.get(
    "/{student_id}/notifications",
    response_model=APIResponse[list[NotificationResponse]],
)
def list_notifications(student_id: str, store: StoreDep) -> APIResponse[list[NotificationResponse]]:
    """Notifications addressed to the student, most recent first."""
    store.get_student(student_id)
    notifications = store.list_notifications(student_id=student_id)
    return APIResponse(data=[notification_to_response(n) for n in notifications])
