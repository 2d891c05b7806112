"""
auth_service.api.errors

HTTP rendering of service errors.

Responsibilities:
- Map `AuthServiceError` subclasses to their status code and a stable JSON envelope.
- Attach `WWW-Authenticate` on 401s for errors that name an auth scheme.
- Log client errors at warning and infrastructure errors at error level.
"""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from auth_service.errors import AuthServiceError
from auth_service.observability.logging import get_logger

log = get_logger(__name__)


def error_body(exc: AuthServiceError) -> dict[str, object]:
    return {"error": {"code": exc.error_code, "message": exc.message}}


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(AuthServiceError)
    async def handle_auth_error(request: Request, exc: AuthServiceError) -> JSONResponse:
        log_fn = log.error if exc.status_code >= 500 else log.warning
        log_fn(
            "request_failed",
            status_code=exc.status_code,
            error_code=exc.error_code,
        )
        headers = None
        if exc.status_code == 401 and exc.auth_scheme:
            headers = {"WWW-Authenticate": exc.auth_scheme}
        return JSONResponse(status_code=exc.status_code, content=error_body(exc), headers=headers)


# --- Module Notes -----------------------------------------------------------
# Messages never embed token values or secrets, so they are safe to return verbatim.
