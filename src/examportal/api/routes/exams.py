"""Exam endpoints."""

from fastapi import APIRouter, Header, Query, status

from examportal.api.dependencies import CoordinatorDep, EventManagerDep, StoreDep
from examportal.api.models import (
    APIResponse,
    ExamCreate,
    ExamResponse,
    exam_to_response,
)

router = APIRouter(prefix="/exams", tags=["exams"])


@router.get("", response_model=APIResponse[list[ExamResponse]])
def list_exams(
    store: StoreDep,
    coordinator: CoordinatorDep,
    upcoming: bool = Query(default=False, description="Only exams still open"),
) -> APIResponse[list[ExamResponse]]:
    """List exams, optionally only those still open for registration."""
    exams = store.list_exams()
    if upcoming:
        exams = [e for e in exams if coordinator.evaluator.is_open(e)]
    return APIResponse(data=[exam_to_response(e) for e in exams])


@router.post(
    "",
    response_model=APIResponse[ExamResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_exam(
    exam: ExamCreate,
    store: StoreDep,
    events: EventManagerDep,
    actor: str = Header(default="admin", alias="X-Actor"),
) -> APIResponse[ExamResponse]:
    """Schedule an exam."""
    created = store.create_exam(
        course_id=exam.course_id,
        title=exam.title,
        exam_date=exam.exam_date,
        fee=exam.fee,
        exam_type=exam.exam_type,
        start_time=exam.start_time,
        venue=exam.venue,
        requires_payment=exam.requires_payment,
        min_attendance=exam.min_attendance,
    )
    events.emit_audit(actor, f"Created exam: {created.title}")
    return APIResponse(data=exam_to_response(created))


@router.get("/{exam_id}", response_model=APIResponse[ExamResponse])
def get_exam(exam_id: str, store: StoreDep) -> APIResponse[ExamResponse]:
    """Get an exam by ID."""
    exam = store.get_exam(exam_id)
    return APIResponse(data=exam_to_response(exam))
