"""Typed view of ``config.yaml``.

Each section of the YAML ``config`` mapping has a model here; ``ConfigData``
is the root and every section falls back to its defaults when omitted.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, computed_field, model_validator

DEV_ACCESS_SECRET = "dev-access-secret-change-me"
DEV_REFRESH_SECRET = "dev-refresh-secret-change-me"


class CORSConfig(BaseModel):
    """CORS configuration for the application."""

    origins: list[str] = Field(
        default=["http://localhost:5173", "http://localhost:3000"]
    )
    allow_credentials: bool = True
    allow_methods: list[str] = Field(
        default=["GET", "POST", "PATCH", "PUT", "DELETE", "OPTIONS"]
    )
    allow_headers: list[str] = Field(default=["*"])


class RateLimiterConfig(BaseModel):
    """Sliding-window limit applied to the authentication endpoints."""

    enabled: bool = True
    requests: int = Field(default=100, gt=0, description="Requests allowed per window")
    window_ms: int = Field(default=60_000, gt=0, description="Window length in milliseconds")
    per_endpoint: bool = Field(default=True, description="Count each route separately")
    per_method: bool = Field(default=True, description="Count each HTTP method separately")


class RedisConfig(BaseModel):
    """Connection used by the redis password-reset backend."""

    url: str = ""
    password: str | None = None
    decode_responses: bool = True

    @computed_field
    @property
    def connection_string(self) -> str:
        """``url`` with ``password`` spliced in, unless the URL already carries credentials."""
        scheme, sep, rest = self.url.partition("://")
        if not self.password or not sep or "@" in rest:
            return self.url
        return f"{scheme}://:{self.password}@{rest}"


class JWTConfig(BaseModel):
    """Signing configuration for access and refresh tokens."""

    algorithm: Literal["HS256", "HS384", "HS512"] = Field(
        default="HS256", description="HMAC algorithm used to sign tokens"
    )
    issuer: str = Field(
        default="savemate-api", description="Issuer name to use when generating tokens"
    )
    access_secret: str = Field(
        default=DEV_ACCESS_SECRET, description="Secret for signing access tokens"
    )
    refresh_secret: str = Field(
        default=DEV_REFRESH_SECRET, description="Secret for signing refresh tokens"
    )
    access_ttl_minutes: int = Field(
        default=15, gt=0, description="Access token lifetime in minutes"
    )
    refresh_ttl_days: int = Field(
        default=14, gt=0, description="Refresh token lifetime in days"
    )
    clock_skew: int = Field(default=0, ge=0, description="Clock skew tolerance in seconds")

    @model_validator(mode="after")
    def _secrets_must_differ(self) -> JWTConfig:
        if not self.access_secret or not self.refresh_secret:
            raise ValueError("JWT access and refresh secrets must be set")
        if self.access_secret == self.refresh_secret:
            raise ValueError("JWT access and refresh secrets must differ")
        return self

    @property
    def access_ttl_seconds(self) -> int:
        return self.access_ttl_minutes * 60

    @property
    def refresh_ttl_seconds(self) -> int:
        return self.refresh_ttl_days * 24 * 3600

    @property
    def uses_dev_secrets(self) -> bool:
        return (
            self.access_secret == DEV_ACCESS_SECRET
            or self.refresh_secret == DEV_REFRESH_SECRET
        )


class PasswordResetConfig(BaseModel):
    """Password reset token storage configuration."""

    backend: Literal["memory", "redis"] = Field(
        default="memory", description="Where one-time reset tokens are kept"
    )
    ttl_seconds: int = Field(
        default=15 * 60, gt=0, description="Reset token lifetime in seconds"
    )
    max_entries: int = Field(
        default=10_000, gt=0, description="Upper bound of in-memory reset tokens"
    )
    key_prefix: str = Field(default="pwreset:", description="Redis key prefix")


class LoggingConfig(BaseModel):
    """Loguru sinks: always stderr, plus an optional rotating file."""

    level: str = "INFO"
    format: Literal["json", "plain"] = Field(
        default="plain", description="Record format of the file sink"
    )
    file: str | None = Field(default=None, description="File sink path; empty disables it")
    max_size_mb: int = Field(default=10, gt=0, description="Rotate the file at this size")
    backup_count: int = Field(default=5, ge=0, description="Rotated files to keep")


class DatabaseConfig(BaseModel):
    """SQLAlchemy engine settings. Pool options are ignored for SQLite."""

    url: str = "sqlite:///./savemate.db"
    echo: bool = False
    pool_size: int = 20
    max_overflow: int = 10
    pool_timeout: int = Field(default=30, description="Seconds to wait for a connection")
    pool_recycle: int = Field(default=1800, description="Seconds before a connection is replaced")

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    @property
    def is_in_memory(self) -> bool:
        return self.is_sqlite and (self.url == "sqlite://" or ":memory:" in self.url)


class UploadsConfig(BaseModel):
    """Local blob store configuration for deal images."""

    directory: str = Field(default="uploads", description="Directory for stored images")
    public_prefix: str = Field(
        default="/uploads", description="URL prefix returned as the image reference"
    )
    max_bytes: int = Field(default=2_500_000, gt=0, description="Maximum image size")


class CatalogConfig(BaseModel):
    """Query engine defaults shared by every deal listing."""

    hide_expired: bool = Field(
        default=True,
        description="Hide approved deals whose validity window has already ended",
    )
    default_limit: int = Field(default=20, ge=1, le=50)
    max_limit: int = Field(default=50, ge=1, le=50)


class AppConfig(BaseModel):
    """Application configuration model."""

    environment: Literal["development", "production", "test"] = Field(
        default="development", description="Application environment"
    )
    host: str = Field(default="localhost", description="Application host")
    port: int = Field(default=8000, description="Application port")
    expose_reset_token: bool | None = Field(
        default=None,
        description="Return password reset tokens in responses (defaults to non-production only)",
    )
    cors: CORSConfig = Field(
        default_factory=CORSConfig, description="CORS configuration"
    )

    @property
    def reveal_reset_token(self) -> bool:
        if self.expose_reset_token is not None:
            return self.expose_reset_token
        return self.environment != "production"


class ConfigData(BaseModel):
    """Root of the ``config`` mapping in config.yaml."""

    app: AppConfig = Field(default_factory=AppConfig)
    jwt: JWTConfig = Field(default_factory=JWTConfig)
    password_reset: PasswordResetConfig = Field(default_factory=PasswordResetConfig)
    redis: RedisConfig = Field(default_factory=RedisConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    rate_limiter: RateLimiterConfig = Field(default_factory=RateLimiterConfig)
    uploads: UploadsConfig = Field(default_factory=UploadsConfig)
    catalog: CatalogConfig = Field(default_factory=CatalogConfig)
