"""
auth_service.services.session_service

Session lifecycle service (transaction owner).

Responsibilities:
- login: verify credentials, mint an access token, issue a refresh token that supersedes
  any prior session of the principal.
- refresh: exchange a live refresh token for a new access token, rotating the refresh
  token value (configurable).
- logout: revoke a refresh token, idempotently.
- register / admin status changes for principals.
- Emit audit events after commit, fire-and-forget.

Session states per principal are implicit in the refresh_tokens table: a row means
ACTIVE, no row means ENDED.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from auth_service.auth.jwt import TokenCodec
from auth_service.auth.models import PrincipalSummary, Role
from auth_service.db.base import utcnow
from auth_service.db.repositories.principals import PrincipalRepo
from auth_service.db.repositories.refresh_tokens import RefreshTokenRepo
from auth_service.errors import (
    AccountDisabled,
    DuplicateIdentifier,
    InvalidCredentials,
    InvalidRefreshToken,
    PrincipalNotFound,
    RefreshTokenExpired,
)
from auth_service.observability.logging import get_logger
from auth_service.services.audit import AuditSink, NullAuditSink, audit_event
from auth_service.services.credentials import CredentialStore, SqlCredentialStore
from auth_service.services.storage import storage_guard
from auth_service.settings import Settings

log = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class LoginResult:
    access_token: str
    refresh_token: str
    refresh_expires_at: datetime
    principal: PrincipalSummary


@dataclass(frozen=True, slots=True)
class RefreshResult:
    access_token: str
    refresh_token: str
    refresh_expires_at: datetime


class SessionService:
    def __init__(
        self,
        *,
        session: AsyncSession,
        settings: Settings,
        codec: TokenCodec,
        credentials: CredentialStore | None = None,
        audit: AuditSink | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._session = session
        self._settings = settings
        self._codec = codec
        self._credentials = credentials or SqlCredentialStore(session)
        self._audit = audit or NullAuditSink()
        self._now = clock

        self._tokens = RefreshTokenRepo(session)
        self._principals = PrincipalRepo(session)

    async def login(self, *, identifier: str, secret: str) -> LoginResult:
        async with storage_guard(self._session, "login"):
            principal = await self._credentials.find_by_identifier(identifier)
            # Unknown identifiers still pay for a hash check, so timing does not reveal them.
            verified = await self._credentials.verify_secret(principal, secret)
            if principal is None or not verified:
                log.info("login_failed", identifier=identifier)
                self._audit.record(
                    audit_event(
                        "LOGIN_FAILED",
                        actor=identifier,
                        principal_id=principal.id if principal else None,
                    )
                )
                raise InvalidCredentials()

            if not principal.enabled:
                log.info("login_denied_disabled", principal_id=str(principal.id))
                self._audit.record(
                    audit_event("LOGIN_DENIED", actor=identifier, principal_id=principal.id)
                )
                raise AccountDisabled()

            summary = principal.summary()
            access_token = self._mint_access(summary)
            now = self._now()
            # Upsert on principal_id: any previous session of this principal ends here.
            refresh_token = await self._tokens.issue(
                principal_id=principal.id,
                ttl=self._settings.refresh_token_ttl,
                now=now,
            )
            await self._session.commit()

        log.info("login_succeeded", principal_id=str(summary.principal_id))
        self._audit.record(audit_event("LOGIN", actor=identifier, principal_id=summary.principal_id))
        return LoginResult(
            access_token=access_token,
            refresh_token=refresh_token,
            refresh_expires_at=now + self._settings.refresh_token_ttl,
            principal=summary,
        )

    async def refresh(self, *, refresh_token: str) -> RefreshResult:
        async with storage_guard(self._session, "refresh"):
            now = self._now()
            record = await self._tokens.lookup(refresh_token)
            if record is None:
                raise InvalidRefreshToken()

            if record.is_expired(now):
                # Drop the dead row so a retry sees InvalidRefreshToken.
                await self._tokens.revoke(refresh_token)
                await self._session.commit()
                log.info("refresh_token_expired", principal_id=str(record.principal_id))
                raise RefreshTokenExpired()

            principal = await self._credentials.get(record.principal_id)
            if principal is None or not principal.enabled:
                await self._tokens.revoke(refresh_token)
                await self._session.commit()
                if principal is None:
                    raise InvalidRefreshToken()
                raise AccountDisabled()

            if self._settings.refresh_rotation:
                # Conditional UPDATE: a concurrent logout/refresh that committed first
                # leaves nothing to rotate.
                next_token = await self._tokens.rotate(refresh_token, now=now)
                if next_token is None:
                    raise InvalidRefreshToken()
            else:
                next_token = refresh_token

            summary = principal.summary()
            access_token = self._mint_access(summary)
            # Rotation keeps the row's expiry, so the session ends when the first token would have.
            expires_at = record.expiry_date
            await self._session.commit()

        self._audit.record(
            audit_event(
                "TOKEN_REFRESH",
                actor=summary.identifier,
                principal_id=summary.principal_id,
                rotated=self._settings.refresh_rotation,
            )
        )
        return RefreshResult(
            access_token=access_token, refresh_token=next_token, refresh_expires_at=expires_at
        )

    async def logout(self, *, refresh_token: str) -> None:
        """
        Always succeeds; revoking an unknown or already revoked token is a no-op.
        """

        async with storage_guard(self._session, "logout"):
            record = await self._tokens.lookup(refresh_token)
            revoked = await self._tokens.revoke(refresh_token)
            await self._session.commit()

        if revoked and record is not None:
            log.info("logout", principal_id=str(record.principal_id))
            self._audit.record(
                audit_event("LOGOUT", actor=str(record.principal_id), principal_id=record.principal_id)
            )
        else:
            log.info("logout_noop")

    async def register(
        self,
        *,
        identifier: str,
        full_name: str,
        secret: str,
        role: Role | None = None,
        actor: str = "system",
    ) -> PrincipalSummary:
        async with storage_guard(self._session, "register"):
            if await self._credentials.find_by_identifier(identifier) is not None:
                raise DuplicateIdentifier()
            principal = await self._credentials.create(
                identifier=identifier,
                full_name=full_name,
                secret=secret,
                role=role or Role.user,
            )
            summary = principal.summary()
            await self._session.commit()

        log.info("principal_registered", principal_id=str(summary.principal_id), role=summary.role)
        self._audit.record(
            audit_event(
                "REGISTER", actor=actor, principal_id=summary.principal_id, role=summary.role
            )
        )
        return summary

    async def list_principals(self) -> list[PrincipalSummary]:
        async with storage_guard(self._session, "list_principals"):
            return [p.summary() for p in await self._principals.list_all()]

    async def set_enabled(
        self,
        *,
        principal_id: uuid.UUID,
        enabled: bool,
        actor: str = "system",
    ) -> PrincipalSummary:
        async with storage_guard(self._session, "set_enabled"):
            principal = await self._principals.set_enabled(principal_id, enabled)
            if principal is None:
                raise PrincipalNotFound(status_code=404)
            if not enabled:
                # A disabled account keeps no live session.
                await self._tokens.revoke_for_principal(principal_id)
            summary = principal.summary()
            await self._session.commit()

        self._audit.record(
            audit_event(
                "PRINCIPAL_ENABLED" if enabled else "PRINCIPAL_DISABLED",
                actor=actor,
                principal_id=principal_id,
            )
        )
        return summary

    def _mint_access(self, principal: PrincipalSummary) -> str:
        return self._codec.mint(
            subject=principal.identifier,
            role=principal.role,
            ttl=self._settings.access_token_ttl,
        )


# --- Module Notes -----------------------------------------------------------
# This service is the transaction boundary: repositories flush, this layer commits.
