"""
auth_service.services.credentials

Credential Store boundary.

Responsibilities:
- Look principals up by identifier or id.
- Verify a plaintext secret against the stored hash (or a dummy hash for unknown
  identifiers, so both paths cost the same).
- Create principals with a hashed secret.

`CredentialStore` is the contract the session and validation services depend on;
`SqlCredentialStore` is the default implementation backed by the service database.
"""

from __future__ import annotations

import asyncio
import uuid
from typing import Protocol

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from auth_service.auth.models import Role
from auth_service.auth.passwords import dummy_hash, hash_password, verify_password
from auth_service.db.models import Principal
from auth_service.db.repositories.principals import PrincipalRepo
from auth_service.errors import DuplicateIdentifier


class CredentialStore(Protocol):
    async def find_by_identifier(self, identifier: str) -> Principal | None: ...

    async def get(self, principal_id: uuid.UUID) -> Principal | None: ...

    async def verify_secret(self, principal: Principal | None, secret: str) -> bool: ...

    async def create(
        self,
        *,
        identifier: str,
        full_name: str,
        secret: str,
        role: Role = Role.user,
    ) -> Principal: ...


class SqlCredentialStore:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._principals = PrincipalRepo(session)

    async def find_by_identifier(self, identifier: str) -> Principal | None:
        return await self._principals.find_by_identifier(identifier)

    async def get(self, principal_id: uuid.UUID) -> Principal | None:
        return await self._principals.get(principal_id)

    async def verify_secret(self, principal: Principal | None, secret: str) -> bool:
        # argon2 is CPU-bound; keep it off the event loop.
        if principal is None:
            await asyncio.to_thread(verify_password, dummy_hash(), secret)
            return False
        return await asyncio.to_thread(verify_password, principal.password_hash, secret)

    async def create(
        self,
        *,
        identifier: str,
        full_name: str,
        secret: str,
        role: Role = Role.user,
    ) -> Principal:
        password_hash = await asyncio.to_thread(hash_password, secret)
        try:
            return await self._principals.create(
                identifier=identifier,
                full_name=full_name,
                password_hash=password_hash,
                role=role,
                enabled=True,
            )
        except IntegrityError as e:
            # Lost a registration race to a concurrent insert of the same identifier.
            await self._session.rollback()
            raise DuplicateIdentifier() from e


# --- Module Notes -----------------------------------------------------------
# Swap this for an HTTP/LDAP-backed store by implementing `CredentialStore`.
