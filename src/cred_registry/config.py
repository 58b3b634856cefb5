"""
Configuration — typed, validated settings loaded from environment/.env.

Uses pydantic-settings to:
  - Load from environment variables (12-factor app)
  - Fall back to .env file
  - Validate types and constraints at startup

Only AppSettings is a BaseSettings instance. Sub-settings are plain
BaseModel classes populated via env_nested_delimiter="__", so the env var
REGISTRY__OWNER maps to registry.owner, DATABASE__HOST to database.host, etc.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from cred_registry.domain.models import is_null_principal

# Resolve the .env file relative to the project root (two levels above this file),
# so settings load correctly regardless of the working directory at runtime.
_ENV_FILE = Path(__file__).parent.parent.parent / ".env"


class RegistrySettings(BaseModel):
    """Registry initialization: who creates it, and whether verification is announced."""

    owner: str = Field(description="Principal of the registry creator, the initial owner")
    emit_verification_events: bool = Field(
        default=False,
        description="Publish an informational CertificateVerified on every verification",
    )

    @field_validator("owner")
    @classmethod
    def validate_owner(cls, value: str) -> str:
        if is_null_principal(value):
            raise ValueError("Registry owner must not be the null principal")
        return value.strip()


class EventSettings(BaseModel):
    """Where notifications are published."""

    backend: Literal["memory", "postgres"] = Field(
        default="memory",
        description="memory keeps events in-process; postgres appends to registry_events",
    )


class DatabaseSettings(BaseModel):
    """
    PostgreSQL connection configuration for the notification outbox.

    Accepts either a full connection string via DATABASE__DSN or individual
    components (DATABASE__HOST, DATABASE__PORT, DATABASE__NAME,
    DATABASE__USERNAME, DATABASE__PASSWORD). The DSN takes priority when
    both are provided.
    """

    dsn: SecretStr | None = Field(
        default=None,
        description="Full PostgreSQL connection string (overrides individual fields)",
    )
    host: str | None = Field(default=None, description="PostgreSQL host")
    port: int = Field(default=5432, ge=1, le=65535, description="PostgreSQL port")
    name: str | None = Field(default=None, description="PostgreSQL database name")
    username: str | None = Field(default=None, description="PostgreSQL username")
    password: SecretStr | None = Field(default=None, description="PostgreSQL password")

    @model_validator(mode="after")
    def resolve_dsn(self) -> DatabaseSettings:
        """
        Ensure `dsn` is always populated.

        Builds the DSN from the individual fields when DATABASE__DSN is not
        set. Raises ValueError at startup if neither is complete.
        """
        if self.dsn is not None:
            return self
        missing = [f for f, v in [
            ("DATABASE__HOST", self.host),
            ("DATABASE__NAME", self.name),
            ("DATABASE__USERNAME", self.username),
            ("DATABASE__PASSWORD", self.password),
        ] if not v]
        if missing:
            raise ValueError(
                "Set DATABASE__DSN or provide all of: "
                + ", ".join(missing)
            )
        dsn_value = (
            f"postgresql://{self.username}:{self.password.get_secret_value()}"  # type: ignore[union-attr]
            f"@{self.host}:{self.port}/{self.name}"
        )
        object.__setattr__(self, "dsn", SecretStr(dsn_value))
        return self

    def get_dsn(self) -> str:
        assert self.dsn is not None  # guaranteed by resolve_dsn validator
        return self.dsn.get_secret_value()


class ApiSettings(BaseModel):
    """HTTP boundary configuration."""

    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000, ge=1, le=65535)
    caller_header: str = Field(
        default="X-Caller-Principal",
        description="Request header carrying the already-authenticated caller principal",
    )


class AppSettings(BaseSettings):
    """
    Root application settings — aggregates all sub-settings.

    Load order (highest priority first):
      1. Environment variables
      2. .env file
      3. Default values
    """

    model_config = SettingsConfigDict(
        env_file=_ENV_FILE,
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    registry: RegistrySettings
    events: EventSettings = Field(default_factory=lambda: EventSettings())
    database: DatabaseSettings | None = None
    api: ApiSettings = Field(default_factory=lambda: ApiSettings())

    log_level: str = Field(default="INFO")
    log_format: Literal["console", "json"] = Field(default="console")

    @model_validator(mode="after")
    def require_database_for_postgres(self) -> AppSettings:
        if self.events.backend == "postgres" and self.database is None:
            raise ValueError("EVENTS__BACKEND=postgres requires DATABASE__DSN or DATABASE__* fields")
        return self
