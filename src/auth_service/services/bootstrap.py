"""
auth_service.services.bootstrap

First-admin bootstrap.

Responsibilities:
- Create the configured admin principal on startup when it does not exist yet, so the
  admin-only registration endpoint is reachable on a fresh database.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from auth_service.auth.models import PrincipalSummary, Role
from auth_service.db.session import session_scope
from auth_service.observability.logging import get_logger
from auth_service.services.credentials import SqlCredentialStore
from auth_service.settings import Settings

log = get_logger(__name__)


async def ensure_admin(
    session_factory: async_sessionmaker[AsyncSession],
    settings: Settings,
) -> PrincipalSummary | None:
    identifier = settings.bootstrap_admin_identifier
    password = settings.bootstrap_admin_password
    if not identifier or not password:
        return None

    async with session_scope(session_factory) as session:
        store = SqlCredentialStore(session)
        existing = await store.find_by_identifier(identifier)
        if existing is not None:
            log.info("bootstrap_admin_exists", principal_id=str(existing.id))
            return existing.summary()
        principal = await store.create(
            identifier=identifier,
            full_name=settings.bootstrap_admin_full_name,
            secret=password,
            role=Role.admin,
        )
        summary = principal.summary()

    log.info("bootstrap_admin_created", principal_id=str(summary.principal_id))
    return summary
