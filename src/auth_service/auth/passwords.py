"""
auth_service.auth.passwords

Password hashing (argon2id).
"""

from __future__ import annotations

import secrets
from functools import lru_cache

from argon2 import PasswordHasher, Type
from argon2.exceptions import InvalidHash, VerificationError

_hasher = PasswordHasher(type=Type.ID)


def hash_password(password: str) -> str:
    return _hasher.hash(password)


def verify_password(password_hash: str, password: str) -> bool:
    try:
        return _hasher.verify(password_hash, password)
    except (VerificationError, InvalidHash):
        return False


@lru_cache(maxsize=1)
def dummy_hash() -> str:
    # Same parameters as real hashes; checked when no principal matches an identifier.
    return hash_password(secrets.token_urlsafe(16))
