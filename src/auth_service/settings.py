"""
auth_service.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide strongly-typed, env-driven settings for all layers.
- Hide secrets from repr/logging (signing key, audit API key, bootstrap password).
- Offer a cached settings instance for dependency injection.
"""

from __future__ import annotations

from datetime import timedelta
from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Env-driven configuration (prefix `AUTH_`).
    Defaults are safe for local dev; prod must override `jwt_secret`.
    """

    model_config = SettingsConfigDict(env_prefix="AUTH_", case_sensitive=False)

    # Environment controls toggle behavior like auto-init DB tables.
    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "auth-service"
    log_level: str = "INFO"

    api_host: str = "0.0.0.0"
    api_port: int = 8080

    # Token signing
    jwt_alg: str = "HS256"
    jwt_issuer: str = "auth-service"
    jwt_audience: str = "auth-clients"
    jwt_secret: str = Field(default="dev-secret-change-me-0123456789abcdef", repr=False)

    # Token lifetimes
    access_token_ttl_minutes: int = Field(default=15, ge=0)
    refresh_token_ttl_days: int = Field(default=7, ge=1)
    # Replace the refresh token value on every refresh call.
    refresh_rotation: bool = True

    # Persistence
    database_url: str = "sqlite+aiosqlite:///./auth.db"

    # Background work
    audit_queue_size: int = Field(default=1000, ge=1)
    # Shared key other services send as `X-API-Key` when posting audit events.
    # Unset disables the ingest endpoint.
    audit_api_key: str | None = Field(default=None, repr=False)
    sweep_interval_seconds: float = Field(default=3600.0, gt=0)

    # Cookies mirrored from login responses
    cookie_secure: bool = True

    # Optional first admin, created on startup when absent.
    bootstrap_admin_identifier: str | None = None
    bootstrap_admin_password: str | None = Field(default=None, repr=False)
    bootstrap_admin_full_name: str = "Administrator"

    @property
    def access_token_ttl(self) -> timedelta:
        return timedelta(minutes=self.access_token_ttl_minutes)

    @property
    def refresh_token_ttl(self) -> timedelta:
        return timedelta(days=self.refresh_token_ttl_days)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # Cache avoids re-parsing env vars for each request dependency.
    return Settings()


# --- Module Notes -----------------------------------------------------------
# The signing key is read once here and frozen into `auth.jwt.JwtConfig` at startup;
# nothing mutates it at runtime.
