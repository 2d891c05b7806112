"""
auth_service.services.audit

Fire-and-forget Audit Sink.

Responsibilities:
- Accept audit events from the request path without blocking or failing it.
- Buffer events in a bounded queue; drop and log when the queue is full.
- Persist events from a background worker using its own DB session.
"""

from __future__ import annotations

import asyncio
import contextlib
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Protocol

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from auth_service.db.base import utcnow
from auth_service.db.repositories.audit import AuditRepo
from auth_service.db.session import session_scope
from auth_service.observability.logging import get_logger

log = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class AuditRecord:
    event_type: str
    actor: str
    principal_id: uuid.UUID | None = None
    details: dict[str, Any] = field(default_factory=dict)
    occurred_at: datetime = field(default_factory=utcnow)
    entity_type: str | None = None
    entity_id: str | None = None
    # None means this service; the sink fills in its own name on write.
    service_name: str | None = None


class AuditSink(Protocol):
    def record(self, event: AuditRecord) -> None: ...


def audit_event(
    event_type: str,
    *,
    actor: str,
    principal_id: uuid.UUID | None = None,
    **details: Any,
) -> AuditRecord:
    # Carry request metadata bound by `RequestContextMiddleware`, when present.
    ctx = structlog.contextvars.get_contextvars()
    for key in ("request_id", "client_ip"):
        if ctx.get(key) is not None:
            details.setdefault(key, ctx[key])
    return AuditRecord(
        event_type=event_type, actor=actor, principal_id=principal_id, details=details
    )


class NullAuditSink:
    def record(self, event: AuditRecord) -> None:
        log.debug("audit_event_discarded", event_type=event.event_type)


class QueuedAuditSink:
    """
    Bounded in-process queue drained by a single background task.

    `record` never awaits and never raises; a full queue drops the event.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        maxsize: int = 1000,
        service_name: str | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._service_name = service_name
        self._queue: asyncio.Queue[AuditRecord] = asyncio.Queue(maxsize=maxsize)
        self._task: asyncio.Task[None] | None = None
        self.dropped = 0

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def record(self, event: AuditRecord) -> None:
        try:
            self._queue.put_nowait(event)
        except asyncio.QueueFull:
            self.dropped += 1
            log.warning(
                "audit_event_dropped",
                event_type=event.event_type,
                actor=event.actor,
                dropped_total=self.dropped,
            )

    async def start(self) -> None:
        if self._task is None:
            self._task = asyncio.create_task(self._run(), name="audit-sink")
            log.info("audit_sink_started", maxsize=self._queue.maxsize)

    async def stop(self, *, timeout: float = 5.0) -> None:
        if self._task is None:
            return
        try:
            # Give queued events a chance to land before shutdown.
            await asyncio.wait_for(self._queue.join(), timeout)
        except TimeoutError:
            log.warning("audit_sink_stop_timeout", pending=self.pending)
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        log.info("audit_sink_stopped", dropped_total=self.dropped)

    async def flush(self) -> None:
        await self._queue.join()

    async def _run(self) -> None:
        while True:
            event = await self._queue.get()
            try:
                await self._write(event)
            except Exception:
                log.exception("audit_write_failed", event_type=event.event_type)
            finally:
                self._queue.task_done()

    async def _write(self, event: AuditRecord) -> None:
        async with session_scope(self._session_factory) as session:
            await AuditRepo(session).add(
                principal_id=event.principal_id,
                actor=event.actor,
                event_type=event.event_type,
                details=dict(event.details),
                entity_type=event.entity_type,
                entity_id=event.entity_id,
                service_name=event.service_name or self._service_name,
                created_at=event.occurred_at,
            )


# --- Module Notes -----------------------------------------------------------
# Audit writes happen outside the login/logout transaction; a slow or failing database
# write here never changes the outcome of authentication.
