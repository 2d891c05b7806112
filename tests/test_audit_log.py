from __future__ import annotations

import uuid
from datetime import UTC, datetime, timedelta, timezone

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from auth_service.db.repositories.audit import AuditRepo
from auth_service.errors import StorageUnavailable
from auth_service.services.audit import QueuedAuditSink, audit_event
from auth_service.services.audit_log import AuditLogService

T0 = datetime(2024, 5, 1, 12, 0, 0)


async def _seed(session: AsyncSession) -> uuid.UUID:
    alice = uuid.uuid4()
    repo = AuditRepo(session)
    await repo.add(
        principal_id=alice, actor="alice", event_type="LOGIN", details={},
        service_name="auth-service", created_at=T0,
    )
    await repo.add(
        principal_id=alice, actor="billing", event_type="UPDATE", details={"amount": 3},
        entity_type="INVOICE", entity_id="inv-1", service_name="billing",
        created_at=T0 + timedelta(minutes=1),
    )
    await repo.add(
        principal_id=None, actor="orders", event_type="CREATE", details={},
        entity_type="ORDER", entity_id="o-9", service_name="orders",
        created_at=T0 + timedelta(minutes=2),
    )
    await repo.add(
        principal_id=alice, actor="alice", event_type="LOGOUT", details={},
        service_name="auth-service", created_at=T0 + timedelta(minutes=3),
    )
    await session.commit()
    return alice


@pytest.mark.asyncio
async def test_search_filters(session: AsyncSession) -> None:
    alice = await _seed(session)
    svc = AuditLogService(session=session)

    everything = await svc.search()
    assert [e.event_type for e in everything] == ["LOGOUT", "CREATE", "UPDATE", "LOGIN"]

    assert [e.event_type for e in await svc.search(principal_id=alice)] == [
        "LOGOUT",
        "UPDATE",
        "LOGIN",
    ]
    assert [e.entity_id for e in await svc.search(entity_type="ORDER")] == ["o-9"]
    assert [e.event_type for e in await svc.search(service_name="billing")] == ["UPDATE"]
    assert [e.event_type for e in await svc.search(event_type="LOGIN")] == ["LOGIN"]
    assert await svc.search(event_type="LOGIN", service_name="billing") == []


@pytest.mark.asyncio
async def test_search_time_window_accepts_aware_bounds(session: AsyncSession) -> None:
    await _seed(session)
    svc = AuditLogService(session=session)

    window = await svc.search(
        since=T0.replace(tzinfo=UTC) + timedelta(minutes=1),
        until=T0.replace(tzinfo=UTC) + timedelta(minutes=2),
    )
    assert [e.event_type for e in window] == ["CREATE", "UPDATE"]

    # 14:00 at +02:00 is 12:00 UTC.
    plus_two = timezone(timedelta(hours=2))
    since = datetime(2024, 5, 1, 14, 0, 0, tzinfo=plus_two)
    assert len(await svc.search(since=since)) == 4
    assert len(await svc.search(since=since + timedelta(seconds=1))) == 3


@pytest.mark.asyncio
async def test_search_pages_with_offset(session: AsyncSession) -> None:
    await _seed(session)
    svc = AuditLogService(session=session)

    first = await svc.search(limit=2)
    second = await svc.search(limit=2, offset=2)
    assert [e.event_type for e in first] == ["LOGOUT", "CREATE"]
    assert [e.event_type for e in second] == ["UPDATE", "LOGIN"]
    assert await svc.search(limit=2, offset=4) == []


@pytest.mark.asyncio
async def test_ingest_queues_external_event(session: AsyncSession, audit) -> None:
    svc = AuditLogService(session=session, audit=audit)
    principal_id = uuid.uuid4()

    record = svc.ingest(
        service_name="billing",
        event_type="UPDATE",
        principal_id=principal_id,
        entity_type="INVOICE",
        entity_id="inv-7",
        occurred_at=datetime(2024, 5, 1, 14, 30, tzinfo=timezone(timedelta(hours=2))),
        details={"amount": 12},
    )

    assert audit.events == [record]
    assert record.actor == "billing"
    assert record.service_name == "billing"
    assert record.occurred_at == datetime(2024, 5, 1, 12, 30)
    assert record.details == {"amount": 12}


@pytest.mark.asyncio
async def test_queued_sink_stamps_own_service_name(
    session_factory: async_sessionmaker[AsyncSession], session: AsyncSession
) -> None:
    sink = QueuedAuditSink(session_factory, maxsize=10, service_name="auth-service")
    svc = AuditLogService(session=session, audit=sink)
    await sink.start()
    try:
        svc.ingest(service_name="orders", event_type="CREATE", entity_type="ORDER")
        sink.record(audit_event("LOGIN", actor="u1"))
        await sink.flush()
    finally:
        await sink.stop()

    by_type = {e.event_type: e for e in await svc.search()}
    assert by_type["CREATE"].service_name == "orders"
    assert by_type["CREATE"].entity_type == "ORDER"
    assert by_type["LOGIN"].service_name == "auth-service"


@pytest.mark.asyncio
async def test_search_storage_failure_is_unavailable(
    session: AsyncSession, monkeypatch: pytest.MonkeyPatch
) -> None:
    async def broken(self, **kwargs):
        raise OperationalError("SELECT", {}, Exception("database is locked"))

    monkeypatch.setattr(AuditRepo, "list_recent", broken)

    with pytest.raises(StorageUnavailable) as exc:
        await AuditLogService(session=session).search()
    assert exc.value.status_code == 503
