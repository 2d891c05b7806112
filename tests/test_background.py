from __future__ import annotations

from datetime import timedelta

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from auth_service.db.base import utcnow
from auth_service.db.repositories.audit import AuditRepo
from auth_service.db.repositories.refresh_tokens import RefreshTokenRepo
from auth_service.services.audit import AuditRecord, QueuedAuditSink, audit_event
from auth_service.services.maintenance import RefreshTokenSweeper


@pytest.mark.asyncio
async def test_full_queue_drops_instead_of_blocking(
    session_factory: async_sessionmaker[AsyncSession],
) -> None:
    sink = QueuedAuditSink(session_factory, maxsize=1)

    sink.record(AuditRecord(event_type="LOGIN", actor="u1"))
    sink.record(AuditRecord(event_type="LOGIN", actor="u2"))

    assert sink.pending == 1
    assert sink.dropped == 1


@pytest.mark.asyncio
async def test_queued_events_are_persisted(
    session_factory: async_sessionmaker[AsyncSession], session: AsyncSession
) -> None:
    sink = QueuedAuditSink(session_factory, maxsize=10)
    await sink.start()
    try:
        sink.record(audit_event("LOGIN", actor="u1", method="password"))
        sink.record(audit_event("LOGOUT", actor="u1"))
        await sink.flush()
    finally:
        await sink.stop()

    events = await AuditRepo(session).list_recent()
    assert sorted(e.event_type for e in events) == ["LOGIN", "LOGOUT"]
    login = next(e for e in events if e.event_type == "LOGIN")
    assert login.details["method"] == "password"


@pytest.mark.asyncio
async def test_sweeper_run_once_removes_expired_tokens(
    session_factory: async_sessionmaker[AsyncSession], session: AsyncSession, add_principal
) -> None:
    p = await add_principal("alice@example.com")
    token = await RefreshTokenRepo(session).issue(principal_id=p.id, ttl=timedelta(days=1))
    await session.commit()

    assert await RefreshTokenSweeper(session_factory, interval_seconds=60).run_once() == 0

    future = RefreshTokenSweeper(
        session_factory,
        interval_seconds=60,
        clock=lambda: utcnow() + timedelta(days=2),
    )
    assert await future.run_once() == 1
    assert await RefreshTokenRepo(session).lookup(token) is None


@pytest.mark.asyncio
async def test_sweeper_start_stop(session_factory: async_sessionmaker[AsyncSession]) -> None:
    sweeper = RefreshTokenSweeper(session_factory, interval_seconds=3600)
    await sweeper.start()
    await sweeper.stop()
    await sweeper.stop()
