"""
auth_service.api.deps

FastAPI dependency wiring for the API layer.

Responsibilities:
- Provide dependency functions for settings, DB sessions and shared singletons
  (token codec, audit sink) created at startup.
- Build per-request services on top of the request-scoped session.
"""

from __future__ import annotations

from collections.abc import AsyncIterator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from auth_service.auth.jwt import TokenCodec
from auth_service.services.audit import AuditSink
from auth_service.services.audit_log import AuditLogService
from auth_service.services.credentials import SqlCredentialStore
from auth_service.services.session_service import SessionService
from auth_service.services.token_validation import TokenValidator
from auth_service.settings import Settings


def settings_dep(request: Request) -> Settings:
    # The settings object the app was built with (tests pass their own).
    return request.app.state.settings  # type: ignore[attr-defined]


def sessionmaker_from_app(request: Request) -> async_sessionmaker[AsyncSession]:
    # Created in the lifespan of `auth_service.api.app.create_app`.
    return request.app.state.sessionmaker  # type: ignore[attr-defined]


def codec_dep(request: Request) -> TokenCodec:
    return request.app.state.codec  # type: ignore[attr-defined]


def audit_dep(request: Request) -> AuditSink:
    return request.app.state.audit_sink  # type: ignore[attr-defined]


async def db_session(
    session_factory: async_sessionmaker[AsyncSession] = Depends(sessionmaker_from_app),
) -> AsyncIterator[AsyncSession]:
    # Request-scoped DB session. Commit/rollback is managed explicitly by the service layer.
    async with session_factory() as session:
        yield session


def session_service_dep(
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
    codec: TokenCodec = Depends(codec_dep),
    audit: AuditSink = Depends(audit_dep),
) -> SessionService:
    return SessionService(session=session, settings=settings, codec=codec, audit=audit)


def audit_log_service_dep(
    session: AsyncSession = Depends(db_session),
    audit: AuditSink = Depends(audit_dep),
) -> AuditLogService:
    return AuditLogService(session=session, audit=audit)


def token_validator_dep(
    session: AsyncSession = Depends(db_session),
    codec: TokenCodec = Depends(codec_dep),
) -> TokenValidator:
    return TokenValidator(codec=codec, credentials=SqlCredentialStore(session))


# --- Module Notes -----------------------------------------------------------
# FastAPI caches `db_session` per request, so both services share one session.
