"""
auth_service.db.models

Persistence schema for the auth service.

Responsibilities:
- Define ORM models:
  - Principal: user account (identifier, password hash, role, enabled flag)
  - RefreshToken: one live session per principal
  - AuditEvent: append-only audit trail (this service and events posted by others)
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Enum, ForeignKey, Index, String, Uuid as SAUuid
from sqlalchemy.orm import Mapped, mapped_column

from auth_service.auth.models import PrincipalSummary, Role
from auth_service.db.base import Base, utcnow


class Principal(Base):
    __tablename__ = "principals"

    id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    identifier: Mapped[str] = mapped_column(String(320), nullable=False, unique=True)
    full_name: Mapped[str] = mapped_column(String(256), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(256), nullable=False)

    # Stored by value ("USER"/"ADMIN") so the column matches the token role claim.
    role: Mapped[Role] = mapped_column(
        Enum(Role, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=Role.user,
    )
    enabled: Mapped[bool] = mapped_column(nullable=False, default=True)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow, onupdate=utcnow)

    def summary(self) -> PrincipalSummary:
        return PrincipalSummary(
            principal_id=self.id,
            identifier=self.identifier,
            full_name=self.full_name,
            role=Role(self.role).value,
            enabled=self.enabled,
        )


class RefreshToken(Base):
    __tablename__ = "refresh_tokens"

    id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    token: Mapped[str] = mapped_column(String(128), nullable=False, unique=True)
    # Unique: at most one live session per principal; upserts conflict on this column.
    principal_id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True),
        ForeignKey("principals.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    expiry_date: Mapped[datetime] = mapped_column(nullable=False, index=True)
    created_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow)

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expiry_date


class AuditEvent(Base):
    __tablename__ = "audit_events"

    id: Mapped[uuid.UUID] = mapped_column(
        SAUuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    principal_id: Mapped[uuid.UUID | None] = mapped_column(
        SAUuid(as_uuid=True), nullable=True, index=True
    )

    actor: Mapped[str] = mapped_column(String(320), nullable=False)  # identifier / system
    event_type: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    entity_type: Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    entity_id: Mapped[str | None] = mapped_column(String(128), nullable=True)
    # Originating service; events posted by other services carry their own name.
    service_name: Mapped[str | None] = mapped_column(String(128), nullable=True, index=True)
    details: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=utcnow, index=True)

    __table_args__ = (Index("ix_audit_principal_created", "principal_id", "created_at"),)


# --- Module Notes -----------------------------------------------------------
# Refresh token values are stored as issued; lookups are by exact value on a unique index.
