"""Admin payment listing."""

from fastapi import APIRouter, Query

from examportal.api.dependencies import StoreDep
from examportal.api.models import (
    APIResponse,
    AdminPaymentResponse,
    admin_payment_to_response,
)
from examportal.store import PaymentStatus

router = APIRouter(prefix="/payments", tags=["payments"])


@router.get("", response_model=APIResponse[list[AdminPaymentResponse]])
def list_payments(
    store: StoreDep,
    payment_status: str = Query(
        default="all", alias="status", pattern="^(all|paid|free)$", description="Filter"
    ),
) -> APIResponse[list[AdminPaymentResponse]]:
    """All payment records with the paying students."""
    status_filter = None if payment_status == "all" else PaymentStatus(payment_status)
    entries = store.list_registrations(status=status_filter)
    return APIResponse(data=[admin_payment_to_response(e) for e in entries])
