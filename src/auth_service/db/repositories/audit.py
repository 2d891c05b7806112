"""
auth_service.db.repositories.audit

Repository for `AuditEvent` entities.

Responsibilities:
- Append audit events (login, logout, refresh, registration, status changes, and events
  posted by other services).
- Search the audit trail for admin review: filter by principal, event type, entity type,
  originating service and time window, newest first, with offset paging.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from auth_service.db.base import utcnow
from auth_service.db.models import AuditEvent


class AuditRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(
        self,
        *,
        principal_id: uuid.UUID | None,
        actor: str,
        event_type: str,
        details: dict[str, Any],
        entity_type: str | None = None,
        entity_id: str | None = None,
        service_name: str | None = None,
        created_at: datetime | None = None,
    ) -> AuditEvent:
        # Audit events are append-only (no update/delete) in normal operation.
        ev = AuditEvent(
            principal_id=principal_id,
            actor=actor,
            event_type=event_type,
            entity_type=entity_type,
            entity_id=entity_id,
            service_name=service_name,
            details=details,
            created_at=created_at or utcnow(),
        )
        self._session.add(ev)
        await self._session.flush()
        return ev

    async def list_recent(
        self,
        *,
        principal_id: uuid.UUID | None = None,
        event_type: str | None = None,
        entity_type: str | None = None,
        service_name: str | None = None,
        since: datetime | None = None,
        until: datetime | None = None,
        limit: int = 200,
        offset: int = 0,
    ) -> list[AuditEvent]:
        """
        Newest-first page of events. `since` and `until` are inclusive naive-UTC bounds.
        """

        stmt = select(AuditEvent)
        if principal_id is not None:
            stmt = stmt.where(AuditEvent.principal_id == principal_id)
        if event_type is not None:
            stmt = stmt.where(AuditEvent.event_type == event_type)
        if entity_type is not None:
            stmt = stmt.where(AuditEvent.entity_type == entity_type)
        if service_name is not None:
            stmt = stmt.where(AuditEvent.service_name == service_name)
        if since is not None:
            stmt = stmt.where(AuditEvent.created_at >= since)
        if until is not None:
            stmt = stmt.where(AuditEvent.created_at <= until)

        # id breaks ties between events written in the same instant so pages are stable.
        stmt = (
            stmt.order_by(desc(AuditEvent.created_at), AuditEvent.id)
            .limit(limit)
            .offset(offset)
        )
        return list((await self._session.execute(stmt)).scalars().all())


# --- Module Notes -----------------------------------------------------------
# Writes come from the background worker in `services.audit`, never the request path.
