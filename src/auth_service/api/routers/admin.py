"""
auth_service.api.routers.admin

Administrative endpoints (role ADMIN).

Responsibilities:
- Register principals.
- List principals and enable/disable accounts.
- Search the audit trail (this service and events posted by other services).
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from starlette.status import HTTP_201_CREATED

from auth_service.api.deps import audit_log_service_dep, session_service_dep
from auth_service.api.routers.auth import PrincipalResponse
from auth_service.auth.deps import require_roles
from auth_service.auth.models import PrincipalSummary, Role
from auth_service.services.audit_log import AuditLogService
from auth_service.services.session_service import SessionService

# One callable so FastAPI resolves the caller once per request.
require_admin = require_roles(Role.admin)

router = APIRouter(
    prefix="/api/admin",
    tags=["admin"],
    dependencies=[Depends(require_admin)],
)


class RegisterRequest(BaseModel):
    identifier: str = Field(min_length=3, max_length=320, pattern=r"^[^@\s]+@[^@\s]+$")
    full_name: str = Field(min_length=1, max_length=256)
    password: str = Field(min_length=6, max_length=1024)
    role: Role | None = None


class AuditEventResponse(BaseModel):
    id: uuid.UUID
    principal_id: uuid.UUID | None
    actor: str
    event_type: str
    entity_type: str | None
    entity_id: str | None
    service_name: str | None
    details: dict[str, Any]
    created_at: datetime


def _principal_response(p: PrincipalSummary) -> PrincipalResponse:
    return PrincipalResponse(
        principal_id=p.principal_id,
        identifier=p.identifier,
        full_name=p.full_name,
        role=p.role,
        enabled=p.enabled,
    )


@router.post("/register", response_model=PrincipalResponse, status_code=HTTP_201_CREATED)
async def register(
    body: RegisterRequest,
    admin: PrincipalSummary = Depends(require_admin),
    svc: SessionService = Depends(session_service_dep),
) -> PrincipalResponse:
    created = await svc.register(
        identifier=body.identifier,
        full_name=body.full_name,
        secret=body.password,
        role=body.role,
        actor=admin.identifier,
    )
    return _principal_response(created)


@router.get("/users", response_model=list[PrincipalResponse])
async def list_users(
    svc: SessionService = Depends(session_service_dep),
) -> list[PrincipalResponse]:
    return [_principal_response(p) for p in await svc.list_principals()]


@router.put("/users/{principal_id}/status", response_model=PrincipalResponse)
async def update_user_status(
    principal_id: uuid.UUID,
    enabled: bool = Query(...),
    admin: PrincipalSummary = Depends(require_admin),
    svc: SessionService = Depends(session_service_dep),
) -> PrincipalResponse:
    updated = await svc.set_enabled(
        principal_id=principal_id, enabled=enabled, actor=admin.identifier
    )
    return _principal_response(updated)


@router.get("/audit", response_model=list[AuditEventResponse])
async def search_audit_events(
    principal_id: uuid.UUID | None = None,
    event_type: str | None = Query(default=None, max_length=64),
    entity_type: str | None = Query(default=None, max_length=64),
    service: str | None = Query(default=None, max_length=128),
    since: datetime | None = None,
    until: datetime | None = None,
    limit: int = Query(default=100, ge=1, le=1000),
    offset: int = Query(default=0, ge=0),
    svc: AuditLogService = Depends(audit_log_service_dep),
) -> list[AuditEventResponse]:
    events = await svc.search(
        principal_id=principal_id,
        event_type=event_type,
        entity_type=entity_type,
        service_name=service,
        since=since,
        until=until,
        limit=limit,
        offset=offset,
    )
    return [
        AuditEventResponse(
            id=e.id,
            principal_id=e.principal_id,
            actor=e.actor,
            event_type=e.event_type,
            entity_type=e.entity_type,
            entity_id=e.entity_id,
            service_name=e.service_name,
            details=e.details,
            created_at=e.created_at,
        )
        for e in events
    ]
