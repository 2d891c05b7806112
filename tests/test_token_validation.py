from __future__ import annotations

from datetime import timedelta

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from auth_service.auth.jwt import TokenCodec
from auth_service.auth.models import PrincipalSummary
from auth_service.errors import (
    InvalidSignature,
    MalformedHeader,
    MalformedToken,
    PrincipalNotFound,
    TokenExpired,
)
from auth_service.services.credentials import SqlCredentialStore
from auth_service.services.session_service import SessionService
from auth_service.services.token_validation import TokenValidator, bearer_token

PASSWORD = "correct horse battery"


@pytest.fixture
def validator(session: AsyncSession, codec: TokenCodec) -> TokenValidator:
    return TokenValidator(codec=codec, credentials=SqlCredentialStore(session))


@pytest.mark.parametrize("header", [None, "", "Bearer", "Bearer   ", "Basic dTE6cHc=", "bearer abc"])
def test_bearer_token_requires_bearer_scheme(header: str | None) -> None:
    with pytest.raises(MalformedHeader):
        bearer_token(header)


def test_bearer_token_strips_prefix() -> None:
    assert bearer_token("Bearer abc.def.ghi") == "abc.def.ghi"


@pytest.mark.asyncio
async def test_validate_returns_identity_summary(
    validator: TokenValidator, service: SessionService, u1: PrincipalSummary
) -> None:
    login = await service.login(identifier="u1", secret=PASSWORD)

    identity = await validator.validate(f"Bearer {login.access_token}")
    assert identity == u1


@pytest.mark.asyncio
async def test_validate_ignores_refresh_token_state(
    validator: TokenValidator, service: SessionService, u1: PrincipalSummary
) -> None:
    login = await service.login(identifier="u1", secret=PASSWORD)
    await service.logout(refresh_token=login.refresh_token)

    # Access tokens stay valid until they expire; validation never reads session state.
    identity = await validator.validate(f"Bearer {login.access_token}")
    assert identity.identifier == "u1"


@pytest.mark.asyncio
async def test_validate_reports_disabled_flag(
    validator: TokenValidator, service: SessionService, u1: PrincipalSummary
) -> None:
    login = await service.login(identifier="u1", secret=PASSWORD)
    await service.set_enabled(principal_id=u1.principal_id, enabled=False)

    identity = await validator.validate(f"Bearer {login.access_token}")
    assert identity.enabled is False


@pytest.mark.asyncio
async def test_validate_unknown_subject(validator: TokenValidator, codec: TokenCodec) -> None:
    token = codec.mint(subject="ghost", role="USER", ttl=timedelta(minutes=5))
    with pytest.raises(PrincipalNotFound):
        await validator.validate(f"Bearer {token}")


@pytest.mark.asyncio
async def test_validate_propagates_codec_failures(
    validator: TokenValidator, codec: TokenCodec, u1: PrincipalSummary
) -> None:
    expired = codec.mint(subject="u1", role="USER", ttl=timedelta(0))
    with pytest.raises(TokenExpired):
        await validator.validate(f"Bearer {expired}")

    with pytest.raises(MalformedToken):
        await validator.validate("Bearer not-a-jwt")

    header, payload, signature = codec.mint(subject="u1", role="USER", ttl=timedelta(minutes=5)).split(".")
    forged = ".".join([header, payload, ("A" if signature[0] != "A" else "B") + signature[1:]])
    with pytest.raises(InvalidSignature):
        await validator.validate(f"Bearer {forged}")
