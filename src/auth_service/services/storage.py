"""
auth_service.services.storage

Storage fault mapping shared by the services that own a request transaction.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from auth_service.errors import StorageUnavailable
from auth_service.observability.logging import get_logger

log = get_logger(__name__)


@asynccontextmanager
async def storage_guard(session: AsyncSession, operation: str) -> AsyncIterator[None]:
    # Storage faults surface as StorageUnavailable so callers can tell them apart from
    # credential errors.
    try:
        yield
    except SQLAlchemyError as e:
        await session.rollback()
        log.error("storage_failure", operation=operation, error_type=type(e).__name__)
        raise StorageUnavailable() from e
