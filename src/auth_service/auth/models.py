"""
auth_service.auth.models

Auth domain models.

Responsibilities:
- Define the read-only identity summary returned by login, registration and validation.
- Define the closed set of role tags.
"""

from __future__ import annotations

import enum
import uuid
from dataclasses import dataclass


class Role(enum.StrEnum):
    user = "USER"
    admin = "ADMIN"


@dataclass(frozen=True, slots=True)
class PrincipalSummary:
    """
    Authenticated identity as exposed to callers and other services.
    Never carries the password hash.
    """

    principal_id: uuid.UUID
    identifier: str
    full_name: str
    role: str
    enabled: bool

    @property
    def is_admin(self) -> bool:
        return self.role == Role.admin


# --- Module Notes -----------------------------------------------------------
# Keep this model minimal; it is used across API, services, and the validation contract.
