"""
auth_service.api.routers.auth

Public authentication endpoints.

Responsibilities:
- Login, refresh and logout for end users.
- Token validation for other services (`/validate-token`).
- Mirror issued tokens into httpOnly cookies for browser clients.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from fastapi import APIRouter, Depends, Header, Response
from pydantic import BaseModel, Field

from auth_service.api.deps import session_service_dep, settings_dep, token_validator_dep
from auth_service.db.base import utcnow
from auth_service.services.session_service import SessionService
from auth_service.services.token_validation import TokenValidator
from auth_service.settings import Settings

router = APIRouter(prefix="/api/auth", tags=["auth"])

ACCESS_COOKIE = "accessToken"
REFRESH_COOKIE = "refreshToken"


class LoginRequest(BaseModel):
    identifier: str = Field(min_length=1, max_length=320)
    password: str = Field(min_length=1, max_length=1024)


class LoginResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    principal_id: uuid.UUID
    identifier: str
    full_name: str
    role: str


class RefreshTokenRequest(BaseModel):
    refresh_token: str = Field(min_length=1, max_length=256)


class RefreshResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class LogoutResponse(BaseModel):
    status: str = "ok"


class PrincipalResponse(BaseModel):
    principal_id: uuid.UUID
    identifier: str
    full_name: str
    role: str
    enabled: bool


def _set_auth_cookies(
    response: Response,
    *,
    settings: Settings,
    access_token: str,
    refresh_token: str,
    refresh_expires_at: datetime,
) -> None:
    common = {"httponly": True, "secure": settings.cookie_secure, "samesite": "none", "path": "/"}
    response.set_cookie(
        ACCESS_COOKIE,
        access_token,
        max_age=int(settings.access_token_ttl.total_seconds()),
        **common,
    )
    response.set_cookie(
        REFRESH_COOKIE,
        refresh_token,
        # Rotation keeps the session expiry, so the cookie follows the record, not the TTL.
        max_age=max(0, int((refresh_expires_at - utcnow()).total_seconds())),
        **common,
    )


def _clear_auth_cookies(response: Response, *, settings: Settings) -> None:
    for name in (ACCESS_COOKIE, REFRESH_COOKIE):
        response.delete_cookie(
            name, path="/", secure=settings.cookie_secure, httponly=True, samesite="none"
        )


@router.post("/login", response_model=LoginResponse)
async def login(
    body: LoginRequest,
    response: Response,
    svc: SessionService = Depends(session_service_dep),
    settings: Settings = Depends(settings_dep),
) -> LoginResponse:
    result = await svc.login(identifier=body.identifier, secret=body.password)
    _set_auth_cookies(
        response,
        settings=settings,
        access_token=result.access_token,
        refresh_token=result.refresh_token,
        refresh_expires_at=result.refresh_expires_at,
    )
    return LoginResponse(
        access_token=result.access_token,
        refresh_token=result.refresh_token,
        principal_id=result.principal.principal_id,
        identifier=result.principal.identifier,
        full_name=result.principal.full_name,
        role=result.principal.role,
    )


@router.post("/refresh", response_model=RefreshResponse)
async def refresh(
    body: RefreshTokenRequest,
    response: Response,
    svc: SessionService = Depends(session_service_dep),
    settings: Settings = Depends(settings_dep),
) -> RefreshResponse:
    result = await svc.refresh(refresh_token=body.refresh_token)
    _set_auth_cookies(
        response,
        settings=settings,
        access_token=result.access_token,
        refresh_token=result.refresh_token,
        refresh_expires_at=result.refresh_expires_at,
    )
    return RefreshResponse(access_token=result.access_token, refresh_token=result.refresh_token)


@router.post("/logout", response_model=LogoutResponse)
async def logout(
    body: RefreshTokenRequest,
    response: Response,
    svc: SessionService = Depends(session_service_dep),
    settings: Settings = Depends(settings_dep),
) -> LogoutResponse:
    await svc.logout(refresh_token=body.refresh_token)
    _clear_auth_cookies(response, settings=settings)
    return LogoutResponse()


@router.post("/validate-token", response_model=PrincipalResponse)
async def validate_token(
    authorization: str | None = Header(default=None),
    validator: TokenValidator = Depends(token_validator_dep),
) -> PrincipalResponse:
    principal = await validator.validate(authorization)
    return PrincipalResponse(
        principal_id=principal.principal_id,
        identifier=principal.identifier,
        full_name=principal.full_name,
        role=principal.role,
        enabled=principal.enabled,
    )


# --- Module Notes -----------------------------------------------------------
# `validate-token` reads no session state: a revoked refresh token does not invalidate
# access tokens already minted, they simply age out.
