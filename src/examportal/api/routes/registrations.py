"""Exam registration endpoints."""

from fastapi import APIRouter, Response, status

from examportal.api.dependencies import CoordinatorDep
from examportal.api.models import (
    APIResponse,
    ConfirmationResponse,
    RegistrationRequest,
    RegistrationResponse,
    registration_result_to_response,
)
from examportal.registration import ReasonCode

router = APIRouter(prefix="/registrations", tags=["registrations"])

_HTTP_STATUS = {
    ReasonCode.OK: status.HTTP_201_CREATED,
    ReasonCode.EXAM_NOT_OPEN: status.HTTP_400_BAD_REQUEST,
    ReasonCode.AMOUNT_MISMATCH: status.HTTP_400_BAD_REQUEST,
    ReasonCode.INSUFFICIENT_ATTENDANCE: status.HTTP_400_BAD_REQUEST,
    ReasonCode.ALREADY_REGISTERED: status.HTTP_409_CONFLICT,
    ReasonCode.TRANSACTION_TIMEOUT: status.HTTP_503_SERVICE_UNAVAILABLE,
    ReasonCode.STORAGE_UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
}


@router.post(
    "",
    response_model=RegistrationResponse,
    status_code=status.HTTP_201_CREATED,
)
def register_for_exam(
    request: RegistrationRequest,
    coordinator: CoordinatorDep,
    response: Response,
) -> RegistrationResponse:
    """Register the student for an exam, record payment and issue the hall ticket."""
    result = coordinator.register_for_exam(
        student_id=request.student_id,
        exam_id=request.exam_id,
        amount=request.amount,
    )
    response.status_code = _HTTP_STATUS[result.code]
    if result.retryable:
        response.headers["Retry-After"] = "1"
    return registration_result_to_response(result)


@router.post(
    "/{student_id}/{exam_id}/confirmation",
    response_model=APIResponse[ConfirmationResponse],
)
def resend_confirmation(
    student_id: str, exam_id: str, coordinator: CoordinatorDep
) -> APIResponse[ConfirmationResponse]:
    """Send the payment confirmation mail again."""
    coordinator.resend_confirmation(student_id, exam_id)
    return APIResponse(data=ConfirmationResponse(message="Payment confirmation email sent"))
