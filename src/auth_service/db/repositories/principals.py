"""
auth_service.db.repositories.principals

Repository for `Principal` entities.

Responsibilities:
- Create principals and fetch them by id or identifier.
- Toggle the enabled flag (admin operation).
"""

from __future__ import annotations

import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from auth_service.auth.models import Role
from auth_service.db.base import utcnow
from auth_service.db.models import Principal


class PrincipalRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
        self,
        *,
        identifier: str,
        full_name: str,
        password_hash: str,
        role: Role = Role.user,
        enabled: bool = True,
    ) -> Principal:
        principal = Principal(
            identifier=identifier,
            full_name=full_name,
            password_hash=password_hash,
            role=role,
            enabled=enabled,
        )
        self._session.add(principal)
        # Flush surfaces unique-constraint violations to the caller.
        await self._session.flush()
        return principal

    async def get(self, principal_id: uuid.UUID) -> Principal | None:
        return await self._session.get(Principal, principal_id)

    async def find_by_identifier(self, identifier: str) -> Principal | None:
        stmt = select(Principal).where(Principal.identifier == identifier)
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def list_all(self) -> list[Principal]:
        stmt = select(Principal).order_by(Principal.created_at)
        return list((await self._session.execute(stmt)).scalars().all())

    async def set_enabled(self, principal_id: uuid.UUID, enabled: bool) -> Principal | None:
        principal = await self._session.get(Principal, principal_id, with_for_update=True)
        if principal is None:
            return None
        principal.enabled = enabled
        principal.updated_at = utcnow()
        await self._session.flush()
        return principal


# --- Module Notes -----------------------------------------------------------
# Password hashes are written here but never read outside `services.credentials`.
