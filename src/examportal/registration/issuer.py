"""Hall Ticket Issuer - proof of registration metadata."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import inspect

from examportal.registration.exceptions import IssuerError
from examportal.store import HallTicket

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

    from examportal.store import RegistrationEntry

logger = logging.getLogger(__name__)


class HallTicketIssuer:
    """Creates the hall ticket row paired with a fresh ledger entry.

    Only the coordinator calls this, with the entry it just flushed in the
    same session. The ticket document itself is produced elsewhere; the
    reference points at where it will be served.
    """

    def __init__(self, base_url: str = "http://localhost:8000/tickets") -> None:
        """Initialize the issuer.

        Args:
            base_url: Base URL under which ticket documents are served.
        """
        self.base_url = base_url.rstrip("/")

    def reference_for(self, student_id: str, exam_id: str) -> str:
        """Reference string for a student's ticket to an exam."""
        return f"{self.base_url}/{student_id}_{exam_id}.pdf"

    def issue(self, session: Session, entry: RegistrationEntry) -> HallTicket:
        """Issue the hall ticket for a ledger entry.

        Args:
            session: The unit of work's session.
            entry: Ledger entry flushed in ``session``.

        Returns:
            The flushed HallTicket.

        Raises:
            IssuerError: If ``entry`` does not belong to ``session``.
        """
        state = inspect(entry)
        if state.session is not session or not state.persistent:
            raise IssuerError(
                f"No ledger entry in this unit of work for student '{entry.student_id}' "
                f"and exam '{entry.exam_id}'"
            )

        ticket = HallTicket(
            registration_id=entry.id,
            student_id=entry.student_id,
            exam_id=entry.exam_id,
            reference=self.reference_for(entry.student_id, entry.exam_id),
        )
        session.add(ticket)
        session.flush()
        logger.debug("Issued hall ticket %s", ticket.reference)
        return ticket
