"""
auth_service.api.routers.audit

Audit ingest for peer services.

Responsibilities:
- Accept audit events posted by other services (`POST /api/audit/log`).
- Authenticate callers with the shared `X-API-Key` from settings.
"""

from __future__ import annotations

import secrets
import uuid
from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends
from fastapi.security import APIKeyHeader
from pydantic import BaseModel, Field
from starlette.status import HTTP_202_ACCEPTED

from auth_service.api.deps import audit_log_service_dep, settings_dep
from auth_service.errors import InvalidApiKey
from auth_service.services.audit_log import AuditLogService
from auth_service.settings import Settings

_api_key = APIKeyHeader(name="X-API-Key", auto_error=False)


def require_api_key(
    api_key: str | None = Depends(_api_key),
    settings: Settings = Depends(settings_dep),
) -> None:
    expected = settings.audit_api_key
    if not expected or not api_key:
        raise InvalidApiKey()
    if not secrets.compare_digest(api_key.encode(), expected.encode()):
        raise InvalidApiKey()


router = APIRouter(
    prefix="/api/audit",
    tags=["audit"],
    dependencies=[Depends(require_api_key)],
)


class AuditLogRequest(BaseModel):
    service_name: str = Field(min_length=1, max_length=128)
    action: str = Field(min_length=1, max_length=64)
    entity_type: str = Field(min_length=1, max_length=64)
    entity_id: str | None = Field(default=None, max_length=128)
    principal_id: uuid.UUID | None = None
    timestamp: datetime | None = None
    ip_address: str | None = Field(default=None, max_length=64)
    details: dict[str, Any] = Field(default_factory=dict)


class AuditLogAccepted(BaseModel):
    status: str = "accepted"


@router.post("/log", response_model=AuditLogAccepted, status_code=HTTP_202_ACCEPTED)
async def log_external_event(
    body: AuditLogRequest,
    svc: AuditLogService = Depends(audit_log_service_dep),
) -> AuditLogAccepted:
    details = dict(body.details)
    if body.ip_address:
        details.setdefault("client_ip", body.ip_address)
    svc.ingest(
        service_name=body.service_name,
        event_type=body.action,
        principal_id=body.principal_id,
        entity_type=body.entity_type,
        entity_id=body.entity_id,
        occurred_at=body.timestamp,
        details=details,
    )
    return AuditLogAccepted()


# --- Module Notes -----------------------------------------------------------
# Events land through the same queued sink as this service's own events; a full queue
# drops them the same way.
