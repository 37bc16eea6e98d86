"""
Configuration and settings for the site backend.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(RuntimeError):
    """Raised when a required collaborator is not configured in production."""


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    app_name: str = Field(default="Farmstay Site API")
    api_prefix: str = Field(default="/api")
    environment: Literal["development", "production"] = Field(default="development")
    log_level: str = Field(default="INFO")

    # Record store (Postgres expected)
    database_url: Optional[str] = Field(default=None)

    # S3-compatible object storage
    storage_endpoint: Optional[str] = Field(default=None)
    storage_region: Optional[str] = Field(default=None)
    storage_public_url: Optional[str] = Field(default=None)
    aws_access_key_id: Optional[str] = Field(default=None)
    aws_secret_access_key: Optional[str] = Field(default=None)
    gallery_bucket: str = Field(default="gallery")
    branding_bucket: str = Field(default="branding")

    # Hosted auth service
    auth_url: Optional[str] = Field(default=None)
    auth_anon_key: Optional[str] = Field(default=None)
    session_cookie_name: str = Field(default="farmstay_session")
    session_cookie_secure: bool = Field(default=False)

    # Local mock mode
    use_in_memory_backends: bool = Field(default=False)
    dev_admin_email: str = Field(default="admin@woodheaven.com")
    dev_admin_password: str = Field(default="admin123")

    # Public site
    cors_origins: str = Field(default="*")
    default_whatsapp_number: str = Field(default="918852021119")

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def has_database(self) -> bool:
        return bool(self.database_url) and not self.use_in_memory_backends

    @property
    def has_storage(self) -> bool:
        # AWS S3 needs no endpoint: keys or a region select it.
        configured = bool(
            self.storage_endpoint
            or self.storage_region
            or (self.aws_access_key_id and self.aws_secret_access_key)
        )
        return configured and not self.use_in_memory_backends

    @property
    def has_auth(self) -> bool:
        return bool(self.auth_url and self.auth_anon_key) and not self.use_in_memory_backends

    @property
    def is_mock_mode(self) -> bool:
        return not (self.has_database and self.has_storage and self.has_auth)

    def cors_origin_list(self) -> list[str]:
        if self.cors_origins.strip() == "*":
            return ["*"]
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
