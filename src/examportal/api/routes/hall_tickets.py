"""Hall ticket lookup endpoints."""

from fastapi import APIRouter, Query

from examportal.api.dependencies import StoreDep
from examportal.api.models import (
    APIResponse,
    HallTicketResponse,
    hall_ticket_to_response,
)

router = APIRouter(prefix="/hall-tickets", tags=["hall-tickets"])


@router.get("", response_model=APIResponse[list[HallTicketResponse]])
def list_hall_tickets(store: StoreDep) -> APIResponse[list[HallTicketResponse]]:
    """List all issued hall tickets."""
    tickets = store.list_hall_tickets()
    return APIResponse(data=[hall_ticket_to_response(t) for t in tickets])


@router.get("/{student_id}", response_model=APIResponse[HallTicketResponse])
def get_hall_ticket(
    student_id: str,
    store: StoreDep,
    exam_id: str = Query(..., description="Exam the ticket was issued for"),
) -> APIResponse[HallTicketResponse]:
    """Get one student's hall ticket for an exam."""
    ticket = store.get_hall_ticket(student_id, exam_id)
    return APIResponse(data=hall_ticket_to_response(ticket))
