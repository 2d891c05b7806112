"""
auth_service.auth.jwt

Signed access token codec.

Responsibilities:
- Mint short-lived JWTs carrying subject, role, token type and expiry.
- Parse and validate JWTs, classifying failures as bad signature, expiry or malformed.

Note:
- HS256 with a single process-wide secret; an RS256 key pair satisfies the same contract.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt
from jwt import (
    DecodeError,
    ExpiredSignatureError,
    InvalidSignatureError,
    InvalidTokenError,
)

from auth_service.errors import InvalidSignature, MalformedToken, TokenExpired
from auth_service.settings import Settings

ACCESS = "access"


@dataclass(frozen=True, slots=True)
class JwtConfig:
    # Algorithm/issuer/audience are enforced during decoding.
    alg: str
    issuer: str
    audience: str
    secret: str

    def __repr__(self) -> str:
        return f"JwtConfig(alg={self.alg!r}, issuer={self.issuer!r}, audience={self.audience!r})"


@dataclass(frozen=True, slots=True)
class TokenClaims:
    subject: str
    role: str
    type: str
    issued_at: datetime
    expires_at: datetime
    token_id: str


class TokenCodec:
    """
    Stateless: a pure function of `JwtConfig`. Safe to share across concurrent requests.
    """

    def __init__(self, cfg: JwtConfig) -> None:
        self._cfg = cfg

    def mint(self, *, subject: str, role: str, ttl: timedelta, type: str = ACCESS) -> str:
        now = datetime.now(tz=UTC)
        payload: dict[str, Any] = {
            "iss": self._cfg.issuer,
            "aud": self._cfg.audience,
            "sub": subject,
            "role": role,
            "type": type,
            "iat": int(now.timestamp()),
            "exp": int((now + ttl).timestamp()),
            # Distinguishes tokens minted within the same second.
            "jti": uuid.uuid4().hex,
        }
        return jwt.encode(payload, self._cfg.secret, algorithm=self._cfg.alg)

    def parse(self, token: str, *, expected_type: str = ACCESS) -> TokenClaims:
        try:
            # PyJWT checks the signature before any registered claim.
            payload = jwt.decode(
                token,
                self._cfg.secret,
                algorithms=[self._cfg.alg],
                issuer=self._cfg.issuer,
                audience=self._cfg.audience,
                options={"require": ["exp", "iat", "iss", "aud", "sub"]},
            )
        except InvalidSignatureError as e:
            raise InvalidSignature() from e
        except ExpiredSignatureError as e:
            raise TokenExpired() from e
        except DecodeError as e:
            raise MalformedToken() from e
        except InvalidTokenError as e:
            raise MalformedToken(f"Token claims rejected: {e}") from e

        subject = payload.get("sub")
        role = payload.get("role")
        token_type = payload.get("type")
        if not isinstance(subject, str) or not subject:
            raise MalformedToken("Token subject is missing")
        if not isinstance(role, str) or not role:
            raise MalformedToken("Token role is missing")
        if token_type != expected_type:
            raise MalformedToken("Unexpected token type")

        return TokenClaims(
            subject=subject,
            role=role,
            type=token_type,
            issued_at=datetime.fromtimestamp(payload["iat"], tz=UTC),
            expires_at=datetime.fromtimestamp(payload["exp"], tz=UTC),
            token_id=str(payload.get("jti", "")),
        )

    def extract_subject(self, token: str) -> str:
        return self.parse(token).subject


def jwt_config_from_settings(settings: Settings) -> JwtConfig:
    return JwtConfig(
        alg=settings.jwt_alg,
        issuer=settings.jwt_issuer,
        audience=settings.jwt_audience,
        secret=settings.jwt_secret,
    )


# --- Module Notes -----------------------------------------------------------
# The codec is built once in `api.app.create_app` and stored on app.state; tests build
# their own with a per-test secret.
