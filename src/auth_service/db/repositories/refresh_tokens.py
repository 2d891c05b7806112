"""
auth_service.db.repositories.refresh_tokens

Refresh Token Store.

Responsibilities:
- Issue opaque refresh tokens, keeping exactly one live record per principal.
- Look up, rotate and revoke tokens with single-statement atomicity.
- Sweep expired records.

Every mutation is one SQL statement, so concurrent logins, refreshes and logouts for
the same principal resolve at the database: the last committed upsert wins, and a
rotate/revoke that loses a race simply matches zero rows.
"""

from __future__ import annotations

import secrets
import uuid
from datetime import datetime, timedelta

from sqlalchemy import delete, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from auth_service.db.base import utcnow
from auth_service.db.models import RefreshToken

# 32 random bytes -> 43 url-safe characters (256 bits).
TOKEN_BYTES = 32

_UPSERT_DIALECTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def new_token_value() -> str:
    return secrets.token_urlsafe(TOKEN_BYTES)


class RefreshTokenRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def issue(
        self,
        *,
        principal_id: uuid.UUID,
        ttl: timedelta,
        now: datetime | None = None,
    ) -> str:
        now = now or utcnow()
        value = new_token_value()

        dialect = self._session.bind.dialect.name
        insert = _UPSERT_DIALECTS.get(dialect)
        if insert is None:
            raise RuntimeError(f"refresh token upsert not supported on {dialect}")

        stmt = insert(RefreshToken).values(
            id=uuid.uuid4(),
            token=value,
            principal_id=principal_id,
            expiry_date=now + ttl,
            created_at=now,
        )
        # Replaces the prior session row in place; the unique index on principal_id
        # makes the replacement atomic.
        stmt = stmt.on_conflict_do_update(
            index_elements=["principal_id"],
            set_={
                "token": stmt.excluded.token,
                "expiry_date": stmt.excluded.expiry_date,
                "created_at": stmt.excluded.created_at,
            },
        )
        await self._session.execute(stmt)
        return value

    async def lookup(self, token: str) -> RefreshToken | None:
        # populate_existing: rows may have been rewritten by upsert/rotate in this session.
        stmt = (
            select(RefreshToken)
            .where(RefreshToken.token == token)
            .execution_options(populate_existing=True)
        )
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def find_by_principal(self, principal_id: uuid.UUID) -> RefreshToken | None:
        stmt = (
            select(RefreshToken)
            .where(RefreshToken.principal_id == principal_id)
            .execution_options(populate_existing=True)
        )
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def rotate(self, token: str, *, now: datetime | None = None) -> str | None:
        """
        Swap `token` for a fresh value, keeping the original expiry date.
        Returns None when the old value is no longer live.
        """

        now = now or utcnow()
        value = new_token_value()
        stmt = (
            update(RefreshToken)
            .where(RefreshToken.token == token, RefreshToken.expiry_date > now)
            .values(token=value)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return value if result.rowcount == 1 else None

    async def revoke(self, token: str) -> bool:
        stmt = (
            delete(RefreshToken)
            .where(RefreshToken.token == token)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return result.rowcount > 0

    async def revoke_for_principal(self, principal_id: uuid.UUID) -> bool:
        stmt = (
            delete(RefreshToken)
            .where(RefreshToken.principal_id == principal_id)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return result.rowcount > 0

    async def sweep_expired(self, now: datetime | None = None) -> int:
        now = now or utcnow()
        stmt = (
            delete(RefreshToken)
            .where(RefreshToken.expiry_date < now)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return result.rowcount or 0


# --- Module Notes -----------------------------------------------------------
# The repository never commits; `services.session_service.SessionService` and
# `services.maintenance.RefreshTokenSweeper` own the transaction boundary.
