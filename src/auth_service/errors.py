"""
auth_service.errors

Error taxonomy for the token lifecycle.

Responsibilities:
- Give every failure a stable machine-readable code and an HTTP status.
- Keep credential failures distinct from infrastructure failures, so callers can tell
  "retry later" apart from "your credential is wrong".

Messages must never include plaintext secrets, signing keys, or token values.
"""

from __future__ import annotations

from typing import Any


class AuthServiceError(Exception):
    status_code: int = 400
    error_code: str = "bad_request"
    # Sent as `WWW-Authenticate` on 401 responses.
    auth_scheme: str | None = "Bearer"

    def __init__(
        self,
        message: str | None = None,
        *,
        status_code: int | None = None,
        detail: dict[str, Any] | None = None,
    ) -> None:
        message = message or self.__class__.__doc__ or self.error_code
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.detail = detail or {}


# Login / registration


class InvalidCredentials(AuthServiceError):
    """Invalid identifier or password"""

    status_code = 401
    error_code = "invalid_credentials"


class AccountDisabled(AuthServiceError):
    """Account is disabled"""

    status_code = 403
    error_code = "account_disabled"


class DuplicateIdentifier(AuthServiceError):
    """Identifier is already registered"""

    status_code = 409
    error_code = "duplicate_identifier"


# Refresh


class InvalidRefreshToken(AuthServiceError):
    """Refresh token is invalid"""

    status_code = 401
    error_code = "invalid_refresh_token"


class RefreshTokenExpired(AuthServiceError):
    """Refresh token has expired"""

    status_code = 401
    error_code = "refresh_token_expired"


# Access token validation


class TokenError(AuthServiceError):
    status_code = 401
    error_code = "invalid_token"


class InvalidSignature(TokenError):
    """Token signature does not verify"""

    error_code = "invalid_signature"


class TokenExpired(TokenError):
    """Token has expired"""

    error_code = "token_expired"


class MalformedToken(TokenError):
    """Token cannot be decoded"""

    error_code = "malformed_token"


class MalformedHeader(TokenError):
    """Authorization header must use the Bearer scheme"""

    error_code = "malformed_header"


class PrincipalNotFound(AuthServiceError):
    """Principal not found"""

    status_code = 401
    error_code = "principal_not_found"


class Forbidden(AuthServiceError):
    """Insufficient role"""

    status_code = 403
    error_code = "forbidden"


# Service-to-service


class InvalidApiKey(AuthServiceError):
    """API key is missing or invalid"""

    status_code = 401
    error_code = "invalid_api_key"
    auth_scheme = None


# Infrastructure


class StorageUnavailable(AuthServiceError):
    """Storage is temporarily unavailable"""

    status_code = 503
    error_code = "storage_unavailable"


# --- Module Notes -----------------------------------------------------------
# `api.errors.register_exception_handlers` renders these; services raise them directly.
