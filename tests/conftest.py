"""
tests.conftest

Shared fixtures: per-test SQLite database, signing key, services and a recording audit sink.
"""

from __future__ import annotations

import secrets
from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from auth_service.auth.jwt import TokenCodec, jwt_config_from_settings
from auth_service.auth.models import PrincipalSummary
from auth_service.db.init_db import init_db
from auth_service.db.repositories.principals import PrincipalRepo
from auth_service.db.session import create_engine, create_sessionmaker
from auth_service.services.audit import AuditRecord
from auth_service.services.session_service import SessionService
from auth_service.settings import Settings

PASSWORD = "correct horse battery"


class RecordingAuditSink:
    def __init__(self) -> None:
        self.events: list[AuditRecord] = []

    def record(self, event: AuditRecord) -> None:
        self.events.append(event)

    def types(self) -> list[str]:
        return [e.event_type for e in self.events]


def make_settings(tmp_path, **overrides) -> Settings:
    values = {
        "env": "test",
        "database_url": f"sqlite+aiosqlite:///{tmp_path / 'auth.db'}",
        "jwt_secret": secrets.token_hex(32),
        "cookie_secure": False,
        "log_level": "WARNING",
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def settings(tmp_path) -> Settings:
    return make_settings(tmp_path)


@pytest.fixture
def codec(settings: Settings) -> TokenCodec:
    return TokenCodec(jwt_config_from_settings(settings))


@pytest_asyncio.fixture
async def engine(settings: Settings) -> AsyncIterator[AsyncEngine]:
    eng = create_engine(settings)
    await init_db(eng)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return create_sessionmaker(engine)


@pytest_asyncio.fixture
async def session(session_factory: async_sessionmaker[AsyncSession]) -> AsyncIterator[AsyncSession]:
    async with session_factory() as s:
        yield s


@pytest.fixture
def audit() -> RecordingAuditSink:
    return RecordingAuditSink()


@pytest.fixture
def service(
    session: AsyncSession,
    settings: Settings,
    codec: TokenCodec,
    audit: RecordingAuditSink,
) -> SessionService:
    return SessionService(session=session, settings=settings, codec=codec, audit=audit)


@pytest_asyncio.fixture
async def u1(service: SessionService) -> PrincipalSummary:
    return await service.register(identifier="u1", full_name="User One", secret=PASSWORD)


@pytest.fixture
def add_principal(session: AsyncSession):
    # Bypasses argon2 for store-level tests.
    # Accepts either ``_add(identifier)`` or ``_add(session, identifier)``.
    async def _add(*args):
        *given, identifier = args
        s = given[0] if given else session
        principal = await PrincipalRepo(s).create(
            identifier=identifier, full_name=identifier.title(), password_hash="unused"
        )
        await s.commit()
        return principal

    return _add
