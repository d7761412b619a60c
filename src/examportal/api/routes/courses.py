"""Course endpoints."""

from fastapi import APIRouter, Header, status

from examportal.api.dependencies import EventManagerDep, StoreDep
from examportal.api.models import (
    APIResponse,
    CourseCreate,
    CourseResponse,
    course_to_response,
)

router = APIRouter(prefix="/courses", tags=["courses"])


@router.get("", response_model=APIResponse[list[CourseResponse]])
def list_courses(store: StoreDep) -> APIResponse[list[CourseResponse]]:
    """List all courses."""
    courses = store.list_courses()
    return APIResponse(data=[course_to_response(c) for c in courses])


@router.post(
    "",
    response_model=APIResponse[CourseResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_course(
    course: CourseCreate,
    store: StoreDep,
    events: EventManagerDep,
    actor: str = Header(default="admin", alias="X-Actor"),
) -> APIResponse[CourseResponse]:
    """Add a course."""
    created = store.create_course(name=course.name, code=course.code)
    events.emit_audit(actor, f"Added course: {created.name} ({created.code})")
    return APIResponse(data=course_to_response(created))
