from fastapi import APIRouter, Depends, Query
from controller.controller_dependencies import get_audit_repository
from model.api import Envelope
from model.audit import AuditEntry
from repository.audit_repository import AuditRepository
from util.constants import InternalURIs

audit_router = APIRouter()


@audit_router.get(InternalURIs.AUDIT, response_model=Envelope[list[AuditEntry]])
async def recent_audit(
    namespace_id: str,
    limit: int = Query(default=50, ge=1, le=500),
    audit: AuditRepository = Depends(get_audit_repository),
) -> Envelope[list[AuditEntry]]:
    return Envelope(result=await audit.recent(namespace_id, limit))
