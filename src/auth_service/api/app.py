"""
auth_service.api.app

FastAPI app factory for the auth service.

Responsibilities:
- Build the FastAPI application and register routers, middleware and error handlers.
- Initialize and dispose shared infrastructure: DB engine/session factory, the token
  codec (signing key), the audit sink worker and the expiry sweeper.
- Provide a single composition root where cross-cutting concerns live.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from auth_service import __version__
from auth_service.api.errors import register_exception_handlers
from auth_service.api.routers.admin import router as admin_router
from auth_service.api.routers.audit import router as audit_router
from auth_service.api.routers.auth import router as auth_router
from auth_service.api.routers.health import router as health_router
from auth_service.auth.jwt import TokenCodec, jwt_config_from_settings
from auth_service.db.init_db import init_db
from auth_service.db.session import create_engine, create_sessionmaker
from auth_service.observability.logging import configure_logging, get_logger
from auth_service.observability.middleware import RequestContextMiddleware
from auth_service.services.audit import QueuedAuditSink
from auth_service.services.bootstrap import ensure_admin
from auth_service.services.maintenance import RefreshTokenSweeper
from auth_service.settings import Settings

log = get_logger(__name__)


def create_app(*, settings: Settings) -> FastAPI:
    # Configure structured logging once at process startup (before app serves requests).
    configure_logging(service_name=settings.service_name, level=settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        log.info("startup", env=settings.env)
        engine = create_engine(settings)
        sessionmaker = create_sessionmaker(engine)
        app.state.engine = engine
        app.state.sessionmaker = sessionmaker
        if settings.env in ("dev", "test"):
            # Dev/test convenience: create tables automatically. Prod should use Alembic migrations.
            await init_db(engine)
        await ensure_admin(sessionmaker, settings)

        audit_sink = QueuedAuditSink(
            sessionmaker,
            maxsize=settings.audit_queue_size,
            service_name=settings.service_name,
        )
        sweeper = RefreshTokenSweeper(sessionmaker, interval_seconds=settings.sweep_interval_seconds)
        app.state.audit_sink = audit_sink
        app.state.sweeper = sweeper
        await audit_sink.start()
        await sweeper.start()
        try:
            yield
        finally:
            await sweeper.stop()
            await audit_sink.stop()
            # Dispose the engine to close pools/FDs gracefully.
            await engine.dispose()
            log.info("shutdown")

    app = FastAPI(
        title="Auth Service",
        version=__version__,
        docs_url="/docs",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.state.settings = settings
    # Signing key is frozen here for the life of the process.
    app.state.codec = TokenCodec(jwt_config_from_settings(settings))

    app.add_middleware(RequestContextMiddleware)
    register_exception_handlers(app)
    app.include_router(health_router, tags=["health"])
    app.include_router(auth_router)
    app.include_router(admin_router)
    app.include_router(audit_router)

    return app


# --- Module Notes -----------------------------------------------------------
# This file is intentionally small: app composition stays here; business logic stays
# in routers/services layers.
