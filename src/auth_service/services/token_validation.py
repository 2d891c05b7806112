"""
auth_service.services.token_validation

Cross-service token validation.

Responsibilities:
- Turn an `Authorization: Bearer <token>` header into a read-only identity summary.
- Rely only on the token signature/expiry plus a principal lookup; the refresh token
  store is never consulted, so validating costs no session round trip.
"""

from __future__ import annotations

from sqlalchemy.exc import SQLAlchemyError

from auth_service.auth.jwt import TokenCodec
from auth_service.auth.models import PrincipalSummary
from auth_service.errors import MalformedHeader, PrincipalNotFound, StorageUnavailable
from auth_service.observability.logging import get_logger
from auth_service.services.credentials import CredentialStore

log = get_logger(__name__)

BEARER_PREFIX = "Bearer "


def bearer_token(authorization: str | None) -> str:
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        raise MalformedHeader()
    token = authorization[len(BEARER_PREFIX) :].strip()
    if not token:
        raise MalformedHeader()
    return token


class TokenValidator:
    def __init__(self, *, codec: TokenCodec, credentials: CredentialStore) -> None:
        self._codec = codec
        self._credentials = credentials

    async def validate(self, authorization: str | None) -> PrincipalSummary:
        token = bearer_token(authorization)
        # InvalidSignature / TokenExpired / MalformedToken propagate unchanged.
        subject = self._codec.extract_subject(token)

        try:
            principal = await self._credentials.find_by_identifier(subject)
        except SQLAlchemyError as e:
            log.error("storage_failure", operation="validate", error_type=type(e).__name__)
            raise StorageUnavailable() from e

        if principal is None:
            log.warning("token_subject_unknown", subject=subject)
            raise PrincipalNotFound()

        log.debug("token_validated", principal_id=str(principal.id))
        return principal.summary()


# --- Module Notes -----------------------------------------------------------
# Used by `POST /api/auth/validate-token` and by `auth.deps.get_principal` for this
# service's own admin routes.
