"""
auth_service.auth.deps

FastAPI dependency functions for authenticating callers of this service.

Responsibilities:
- Convert the `Authorization` header into a `PrincipalSummary` via `TokenValidator`.
- Enforce role checks via reusable dependency factories.
"""

from __future__ import annotations

from fastapi import Depends
from fastapi.security import APIKeyHeader

from auth_service.api.deps import token_validator_dep
from auth_service.auth.models import PrincipalSummary, Role
from auth_service.errors import AccountDisabled, Forbidden
from auth_service.services.token_validation import TokenValidator

# Raw header value; `TokenValidator` checks the Bearer scheme itself.
_authorization = APIKeyHeader(name="Authorization", auto_error=False)


async def get_principal(
    authorization: str | None = Depends(_authorization),
    validator: TokenValidator = Depends(token_validator_dep),
) -> PrincipalSummary:
    principal = await validator.validate(authorization)
    # Validation reports the enabled flag; this service refuses disabled callers.
    if not principal.enabled:
        raise AccountDisabled()
    return principal


def require_roles(*required: Role | str):
    required_set = frozenset(str(r) for r in required)

    def _dep(principal: PrincipalSummary = Depends(get_principal)) -> PrincipalSummary:
        if principal.role not in required_set:
            raise Forbidden()
        return principal

    return _dep


# --- Module Notes -----------------------------------------------------------
# Used by the admin router; other services call `/api/auth/validate-token` instead.
