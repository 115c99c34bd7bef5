"""
identity_admin.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide strongly-typed, env-driven settings for all layers.
- Hide secrets from repr/logging (e.g., JWT secret).
- Offer a cached settings instance for dependency injection.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    - Strict env-driven configuration
    - Defaults safe for local dev
    - Single settings object injected across layers
    """

    model_config = SettingsConfigDict(env_prefix="IDENTITY_ADMIN_", case_sensitive=False)

    # Environment controls toggle behavior like auto-init DB tables and dev routes.
    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "identity-admin"
    log_level: str = "INFO"
    # JSON lines for log shippers; set false for human-readable local output.
    log_json: bool = True

    api_host: str = "0.0.0.0"
    api_port: int = 3001

    # Bearer tokens (bundled identity provider)
    jwt_alg: str = "HS256"
    jwt_issuer: str = "identity-admin"
    jwt_audience: str = "identity-admin-api"
    jwt_secret: str = Field(default="dev-secret-change-me", repr=False)
    token_ttl_minutes: int = Field(default=60, ge=1)
    # Clock skew tolerated on exp/iat when validating.
    jwt_leeway_seconds: int = Field(default=10, ge=0)

    # Persistence (tombstones, audit, bundled provider + document store)
    database_url: str = "sqlite+aiosqlite:///./identity_admin.db"
    db_busy_timeout_seconds: float = Field(default=15.0, gt=0)

    # Admin policy: emails allowed to call /api/admin/*. Parsed from a JSON list in env.
    admin_emails: list[str] = Field(default_factory=list)
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:3000", "http://localhost:3001"]
    )

    # Lifecycle
    bulk_max_concurrency: int = Field(default=1, ge=1, le=32)
    retry_max_attempts: int = Field(default=3, ge=1)
    retry_base_delay: float = Field(default=0.2, ge=0.0)
    retry_max_delay: float = Field(default=2.0, ge=0.0)

    # Directory
    list_users_limit: int = Field(default=1000, ge=1, le=1000)
    profile_collections: list[str] = Field(default_factory=lambda: ["userProfiles", "users"])


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # Cache avoids re-parsing env vars for each request dependency.
    return Settings()


# --- Module Notes -----------------------------------------------------------
# The admin allow-list lives here (not in module globals of the auth package) so each
# environment, and each test, can inject its own policy.
