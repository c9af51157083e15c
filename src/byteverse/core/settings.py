"""Application settings and configuration.

This module defines all configuration options for the ByteVerse API.
Settings are loaded from environment variables with sensible defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="ByteVerse API", alias="APP_NAME")
    app_version: str = Field(default="1.0.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Database configuration
    database_url: str = Field(default="sqlite:///./byteverse.db", alias="DATABASE_URL")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # JWT authentication settings; user and admin tokens use separate secrets
    jwt_secret: str = Field(alias="JWT_SECRET")
    admin_jwt_secret: str = Field(alias="ADMIN_JWT_SECRET")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(
        default=60 * 24 * 30,
        alias="ACCESS_TOKEN_EXPIRE_MINUTES",
    )
    admin_token_expire_minutes: int = Field(
        default=60 * 24,
        alias="ADMIN_TOKEN_EXPIRE_MINUTES",
    )
    auth_cookie_secure: bool = Field(default=False, alias="AUTH_COOKIE_SECURE")
    email_verification_expire_hours: int = Field(
        default=24,
        alias="EMAIL_VERIFICATION_EXPIRE_HOURS",
    )
    reset_password_expire_minutes: int = Field(
        default=10,
        alias="RESET_PASSWORD_EXPIRE_MINUTES",
    )
    principal_lookup_timeout_seconds: float = Field(
        default=5.0,
        alias="PRINCIPAL_LOOKUP_TIMEOUT_SECONDS",
    )

    # Abuse monitor thresholds (requests / distinct endpoints per window)
    abuse_rate_threshold: int = Field(default=50, alias="ABUSE_RATE_THRESHOLD")
    abuse_rate_window_seconds: float = Field(default=10.0, alias="ABUSE_RATE_WINDOW_SECONDS")
    abuse_scan_threshold: int = Field(default=20, alias="ABUSE_SCAN_THRESHOLD")
    abuse_scan_window_seconds: float = Field(default=30.0, alias="ABUSE_SCAN_WINDOW_SECONDS")
    abuse_retention_seconds: float = Field(default=3600.0, alias="ABUSE_RETENTION_SECONDS")

    # Background sweep of stale activity records and expired blocks
    abuse_sweep_enabled: bool = Field(default=True, alias="ABUSE_SWEEP_ENABLED")
    abuse_sweep_interval_seconds: float = Field(
        default=600.0,
        alias="ABUSE_SWEEP_INTERVAL_SECONDS",
    )

    # 0 keeps an address blocked until an operator removes it
    blocklist_ttl_seconds: float = Field(default=3600.0, alias="BLOCKLIST_TTL_SECONDS")
    loopback_exemptions: list[str] = Field(
        default=["127.0.0.1", "::1"],
        alias="LOOPBACK_EXEMPTIONS",
    )
    trust_proxy_headers: bool = Field(default=False, alias="TRUST_PROXY_HEADERS")
    security_headers_enabled: bool = Field(default=True, alias="SECURITY_HEADERS_ENABLED")

    # CORS configuration for web frontend access
    cors_origins: list[str] = Field(
        default=[
            "http://localhost:5173",
            "https://byteverse.tech",
            "https://www.byteverse.tech",
        ],
        alias="CORS_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "PUT", "POST", "DELETE", "OPTIONS", "PATCH"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(
        default=["Content-Type", "Authorization", "X-Requested-With", "admin-token"],
        alias="CORS_ALLOW_HEADERS",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        populate_by_name=True,
        extra="ignore",
    )

    @property
    def blocklist_ttl(self) -> float | None:
        """Return the blocklist TTL in seconds, or None for permanent blocks."""
        if self.blocklist_ttl_seconds <= 0:
            return None
        return self.blocklist_ttl_seconds

    @property
    def shares_jwt_secret(self) -> bool:
        """Return True when user and admin tokens are signed with the same key."""
        return self.jwt_secret == self.admin_jwt_secret


settings = Settings()  # type: ignore[call-arg]
