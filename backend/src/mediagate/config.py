"""Media Gateway — Application Configuration."""

from __future__ import annotations

import enum
from typing import Any

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from mediagate.shared.egress.types import RetryPolicy


class Environment(str, enum.Enum):
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class Settings(BaseSettings):
    """Centralised, validated configuration loaded from environment / .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_ignore_empty=True,
    )

    # ── Application ──────────────────────────────────────────
    app_name: str = "mediagate"
    app_env: Environment = Environment.DEVELOPMENT
    app_debug: bool = False
    app_host: str = "0.0.0.0"
    app_port: int = 3001
    log_level: str = "INFO"
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])

    # ── Egress providers ─────────────────────────────────────
    # A provider is enabled only when all of its fields are set.
    brightdata_username: str = ""
    brightdata_password: str = ""
    brightdata_host: str = ""
    brightdata_port: int | None = None

    smartproxy_username: str = ""
    smartproxy_password: str = ""
    smartproxy_host: str = "gate.smartproxy.com"
    smartproxy_port: int | None = 7000

    oxylabs_username: str = ""
    oxylabs_password: str = ""
    oxylabs_host: str = "pr.oxylabs.io"
    oxylabs_port: int | None = 7777

    # Plain-text host:port list, one entry per line
    free_proxy_list_url: str = ""
    free_proxy_list_timeout_seconds: float = 10.0

    proxy_scheme: str = "http"

    # ── Retry policy ─────────────────────────────────────────
    retry_max_attempts: int = Field(default=3, ge=1)
    retry_base_delay_ms: int = Field(default=1000, ge=0)
    retry_max_delay_ms: int = Field(default=10_000, ge=0)

    # ── Media ────────────────────────────────────────────────
    downloads_dir: str = "downloads"
    download_cleanup_delay_seconds: float = 60.0
    media_socket_timeout_seconds: float = 30.0

    # ── Route probe ──────────────────────────────────────────
    probe_url: str = "http://ip-api.com/json"
    probe_timeout_seconds: float = 10.0

    # ── Derived helpers ──────────────────────────────────────
    @property
    def is_production(self) -> bool:
        return self.app_env == Environment.PRODUCTION

    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(
            max_attempts=self.retry_max_attempts,
            base_delay_ms=self.retry_base_delay_ms,
            max_delay_ms=self.retry_max_delay_ms,
        )

    @field_validator("log_level")
    @classmethod
    def _upper_log_level(cls, v: str) -> str:
        return v.upper()

    @field_validator("proxy_scheme")
    @classmethod
    def _validate_proxy_scheme(cls, v: str) -> str:
        v = v.lower().strip()
        if v not in ("http", "https", "socks5"):
            raise ValueError("proxy_scheme must be one of: http, https, socks5")
        return v

    @model_validator(mode="after")
    def _check_delay_bounds(self) -> Settings:
        if self.retry_base_delay_ms > self.retry_max_delay_ms:
            raise ValueError("retry_base_delay_ms must not exceed retry_max_delay_ms")
        return self


def get_settings(**overrides: Any) -> Settings:
    """Factory that allows test-time overrides."""
    return Settings(**overrides)
