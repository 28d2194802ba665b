# authguard/adapters/configuration/config.py

"""
Application Settings Configuration
"""

from enum import Enum
from functools import lru_cache
from logging import getLevelName
from pathlib import Path
from typing import Optional, Union

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# .env na raiz do projeto
env_path = Path(__file__).parent.parent.parent.parent / ".env"


class RevocationBackend(str, Enum):
    memory = "memory"
    database = "database"


class Settings(BaseSettings):
    """
    Application settings for tokens, cookies, revocation, uploads and logging.

    Built once at process start (see ``get_settings``) and passed explicitly to
    the components that need it.
    """
    model_config = SettingsConfigDict(
        env_file=str(env_path),
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # General Project Info
    PROJECT_NAME: str = Field(default="authguard", description="Name of the project")
    VERSION: str = Field(default="1.0.0", description="Application version")
    ENVIRONMENT: str = Field(default="development", description="Environment: development, production, testing")
    DEBUG: bool = Field(default=False, description="Enable debug mode (detailed error logs)")

    # Logging
    LOG_LEVEL: str = Field(default="INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)")

    # Token settings
    JWT_SECRET: Optional[SecretStr] = Field(
        default=None, description="Base64 encoded signing secret (at least 32 characters)"
    )
    JWT_ACCESS_TOKEN_EXPIRATION_MS: int = Field(default=3_600_000, description="Access token TTL (milliseconds)")
    JWT_REFRESH_TOKEN_EXPIRATION_MS: int = Field(default=604_800_000, description="Refresh token TTL (milliseconds)")
    JWT_ISSUER: str = Field(default="authguard", description="Issuer written to and required on every token")
    JWT_AUDIENCE: str = Field(default="authguard-users", description="Audience written to and required on every token")
    JWT_ROTATE_REFRESH_TOKENS: bool = Field(
        default=True, description="Revoke the presented refresh token and issue a new one on refresh"
    )

    # Cookies
    COOKIE_DOMAIN: Optional[str] = Field(default=None, description="Domain for cookies (e.g. example.com)")

    # Revocation
    REVOCATION_BACKEND: RevocationBackend = Field(
        default=RevocationBackend.memory, description="Revocation store: memory or database"
    )
    REVOCATION_MEMORY_MAX_ENTRIES: int = Field(
        default=100_000, description="Maximum number of revoked jti kept by the in-memory store"
    )
    REVOCATION_CLEANUP_INTERVAL_SECONDS: int = Field(
        default=300, description="Seconds between purges of expired revocation entries"
    )
    DATABASE_URL: str = Field(
        default="sqlite:///./authguard.db", description="SQLAlchemy URL used by the database revocation store"
    )

    # Uploads
    UPLOAD_MAX_FILE_SIZE: int = Field(default=3 * 1024 * 1024, description="Maximum upload size (bytes)")
    UPLOAD_MAX_IMAGE_WIDTH: int = Field(default=4096, description="Maximum decoded image width (pixels)")
    UPLOAD_MAX_IMAGE_HEIGHT: int = Field(default=4096, description="Maximum decoded image height (pixels)")

    # Client IP resolution
    TRUST_FORWARDED_FOR: bool = Field(
        default=False, description="Use the first X-Forwarded-For entry as the client IP (behind a trusted proxy)"
    )

    @property
    def access_token_ttl_seconds(self) -> int:
        return self.JWT_ACCESS_TOKEN_EXPIRATION_MS // 1000

    @property
    def refresh_token_ttl_seconds(self) -> int:
        return self.JWT_REFRESH_TOKEN_EXPIRATION_MS // 1000

    @field_validator("DEBUG", "JWT_ROTATE_REFRESH_TOKENS", "TRUST_FORWARDED_FOR", mode="before")
    def parse_boolean(cls, v: Union[str, bool]) -> bool:
        """Convert string boolean values to proper boolean."""
        if isinstance(v, bool):
            return v
        if isinstance(v, str):
            return v.lower() in ("true", "1", "yes", "y", "on")
        return bool(v)

    @field_validator("COOKIE_DOMAIN", mode="before")
    def blank_cookie_domain(cls, v: Optional[str]) -> Optional[str]:
        # Domínio vazio no .env = cookie host-only
        if v is None or not str(v).strip():
            return None
        return str(v).strip()

    @field_validator("LOG_LEVEL", mode="before")
    def validate_log_level(cls, v: str) -> str:
        """
        Validate that the log level is a valid level name.
        """
        lvl = v.upper()
        if getLevelName(lvl) == "Level %s" % lvl:
            raise ValueError(f"Invalid LOG_LEVEL: {v}")
        return lvl

    @field_validator("REVOCATION_BACKEND", mode="before")
    def validate_revocation_backend(cls, v: Union[str, RevocationBackend]) -> str:
        """Valida o backend de revogação."""
        value = v.value if isinstance(v, RevocationBackend) else str(v).lower()
        if value not in [b.value for b in RevocationBackend]:
            raise ValueError(f"REVOCATION_BACKEND must be 'memory' or 'database', got: {v}")
        return value

    @field_validator(
        "JWT_ACCESS_TOKEN_EXPIRATION_MS",
        "JWT_REFRESH_TOKEN_EXPIRATION_MS",
        "REVOCATION_MEMORY_MAX_ENTRIES",
        "REVOCATION_CLEANUP_INTERVAL_SECONDS",
        "UPLOAD_MAX_FILE_SIZE",
        "UPLOAD_MAX_IMAGE_WIDTH",
        "UPLOAD_MAX_IMAGE_HEIGHT",
        mode="before",
    )
    def validate_positive_int(cls, v: Union[str, int], info) -> int:
        """Converts and validates strictly positive integers."""
        if isinstance(v, str):
            try:
                v = int(v)
            except ValueError:
                raise ValueError(f"{info.field_name} must be an integer, got: {v}")
        if v <= 0:
            raise ValueError(f"{info.field_name} must be positive, got: {v}")
        return v


@lru_cache()
def get_settings() -> Settings:
    """Return the process-wide settings, built on first use."""
    return Settings()
