"""
auth_service.services.audit_log

Audit trail service for admins and peer services.

Responsibilities:
- Search persisted audit events with filters and paging.
- Accept audit events posted by other services and hand them to the Audit Sink.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from auth_service.db.base import as_naive_utc, utcnow
from auth_service.db.models import AuditEvent
from auth_service.db.repositories.audit import AuditRepo
from auth_service.observability.logging import get_logger
from auth_service.services.audit import AuditRecord, AuditSink, NullAuditSink
from auth_service.services.storage import storage_guard

log = get_logger(__name__)


class AuditLogService:
    def __init__(self, *, session: AsyncSession, audit: AuditSink | None = None) -> None:
        self._session = session
        self._audit = audit or NullAuditSink()
        self._events = AuditRepo(session)

    async def search(
        self,
        *,
        principal_id: uuid.UUID | None = None,
        event_type: str | None = None,
        entity_type: str | None = None,
        service_name: str | None = None,
        since: datetime | None = None,
        until: datetime | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[AuditEvent]:
        async with storage_guard(self._session, "search_audit_events"):
            return await self._events.list_recent(
                principal_id=principal_id,
                event_type=event_type,
                entity_type=entity_type,
                service_name=service_name,
                since=as_naive_utc(since) if since else None,
                until=as_naive_utc(until) if until else None,
                limit=limit,
                offset=offset,
            )

    def ingest(
        self,
        *,
        service_name: str,
        event_type: str,
        principal_id: uuid.UUID | None = None,
        entity_type: str | None = None,
        entity_id: str | None = None,
        occurred_at: datetime | None = None,
        details: dict[str, Any] | None = None,
    ) -> AuditRecord:
        """
        Queue an externally reported event. Fire-and-forget like every other audit write:
        the caller gets an acknowledgement, not a persistence guarantee.
        """

        record = AuditRecord(
            event_type=event_type,
            actor=service_name,
            principal_id=principal_id,
            details=dict(details or {}),
            occurred_at=as_naive_utc(occurred_at) if occurred_at else utcnow(),
            entity_type=entity_type,
            entity_id=entity_id,
            service_name=service_name,
        )
        self._audit.record(record)
        log.info("audit_event_ingested", service_name=service_name, event_type=event_type)
        return record
