"""
auth_service.services.maintenance

Periodic expiry sweep for refresh tokens.

Responsibilities:
- Delete refresh tokens whose expiry date has passed, off the request path.
- Run on a fixed interval as an asyncio task tied to the app lifespan.
"""

from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Callable
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from auth_service.db.base import utcnow
from auth_service.db.repositories.refresh_tokens import RefreshTokenRepo
from auth_service.db.session import session_scope
from auth_service.observability.logging import get_logger

log = get_logger(__name__)


class RefreshTokenSweeper:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        interval_seconds: float,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._session_factory = session_factory
        self._interval = interval_seconds
        self._now = clock
        self._task: asyncio.Task[None] | None = None

    async def run_once(self) -> int:
        async with session_scope(self._session_factory) as session:
            deleted = await RefreshTokenRepo(session).sweep_expired(self._now())
        log.info("refresh_tokens_swept", deleted=deleted)
        return deleted

    async def start(self) -> None:
        if self._task is None:
            self._task = asyncio.create_task(self._loop(), name="refresh-token-sweeper")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            try:
                await self.run_once()
            except Exception:
                # Keep sweeping on the next tick; a failed sweep only delays cleanup.
                log.exception("refresh_token_sweep_failed")


# --- Module Notes -----------------------------------------------------------
# Expired tokens are already rejected by `SessionService.refresh`; the sweep only
# reclaims rows.
