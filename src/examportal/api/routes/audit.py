"""Audit log endpoints."""

from fastapi import APIRouter, Query

from examportal.api.dependencies import StoreDep
from examportal.api.models import APIResponse, AuditLogResponse, audit_to_response

router = APIRouter(prefix="/audit-log", tags=["audit"])


@router.get("", response_model=APIResponse[list[AuditLogResponse]])
def list_audit_log(
    store: StoreDep,
    limit: int = Query(default=100, ge=1, le=1000, description="Max results"),
    offset: int = Query(default=0, ge=0, description="Pagination offset"),
) -> APIResponse[list[AuditLogResponse]]:
    """List audit log entries, most recent first."""
    entries = store.list_audit_log(limit=limit, offset=offset)
    return APIResponse(data=[audit_to_response(e) for e in entries])
