"""Application settings and configuration."""

import logging

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.config.cors_config import CORSConfiguration, CORSConfigurationError

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application (hardcoded constants)
    app_name: str = "crux-backend"
    app_version: str = "1.0.0"

    # Environment-specific settings
    debug: bool = False
    environment: str = "development"  # development, staging, production

    # Database
    database_url: str
    database_pool_size: int = 10
    database_max_overflow: int = 20
    database_pool_timeout: int = 30
    database_pool_recycle: int = 3600
    database_echo: bool = False
    database_create_all: bool = False

    # API
    api_prefix: str = ""

    # CORS Configuration (environment-aware)
    cors_allow_origins: str | None = None
    cors_allow_origin_regex: str | None = None
    cors_max_age: int = 43200

    # Security - both secrets are required, the service refuses to start without them
    access_token_secret_key: str
    refresh_token_secret_key: str
    jwt_algorithm: str = "HS256"
    jwt_issuer: str = "crux-backend"
    access_token_expire_minutes: int = 15
    refresh_token_expire_days: int = 7
    session_expire_days: int = 7

    # Cookies
    cookie_secure: bool = False
    cookie_samesite: str = "lax"

    # Rate limiting
    rate_limit_enabled: bool = True
    login_rate_limit: str = "10/minute"

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("environment", mode="before")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment value."""
        valid_envs = {"development", "staging", "production"}
        env = str(v).lower()
        if env not in valid_envs:
            raise ValueError(f"Environment must be one of {valid_envs}, got {env}")
        return env

    @field_validator("access_token_secret_key", "refresh_token_secret_key")
    @classmethod
    def secret_not_blank(cls, value: str) -> str:
        """Reject empty or whitespace-only signing secrets."""
        if not value or not value.strip():
            raise ValueError("Token signing secrets must not be empty")
        return value

    @field_validator("jwt_algorithm")
    @classmethod
    def hmac_algorithm_only(cls, value: str) -> str:
        """Tokens are signed with shared secrets, so only HMAC algorithms make sense."""
        if value not in {"HS256", "HS384", "HS512"}:
            raise ValueError(f"JWT algorithm must be an HMAC algorithm, got {value}")
        return value

    @field_validator("cookie_samesite", mode="before")
    @classmethod
    def validate_samesite(cls, v: str) -> str:
        """Validate cookie SameSite value."""
        value = str(v).lower()
        if value not in {"lax", "strict", "none"}:
            raise ValueError(f"Cookie SameSite must be one of lax, strict, none, got {value}")
        return value

    @model_validator(mode="after")
    def secrets_are_independent(self) -> "Settings":
        """Access and refresh tokens must be signed with different secrets."""
        if self.access_token_secret_key == self.refresh_token_secret_key:
            raise ValueError("ACCESS_TOKEN_SECRET_KEY and REFRESH_TOKEN_SECRET_KEY must differ")
        return self

    @property
    def access_token_max_age(self) -> int:
        """Access token lifetime in seconds."""
        return self.access_token_expire_minutes * 60

    @property
    def refresh_token_max_age(self) -> int:
        """Refresh token lifetime in seconds."""
        return self.refresh_token_expire_days * 24 * 60 * 60

    def get_cors_configuration(self) -> CORSConfiguration:
        """Get CORS configuration based on environment settings.

        Delegates all validation to CORSConfiguration factory methods.

        Returns:
            CORSConfiguration instance

        Raises:
            CORSConfigurationError: If CORS configuration is invalid or insecure.

        """
        try:
            if self.environment == "development":
                return CORSConfiguration.for_development(
                    allow_origins=self.cors_allow_origins,
                    max_age=self.cors_max_age,
                )
            elif self.environment == "staging":
                return CORSConfiguration.for_staging(
                    allow_origins=self.cors_allow_origins or "",
                    max_age=self.cors_max_age,
                )
            else:  # production
                return CORSConfiguration.for_production(
                    allow_origins=self.cors_allow_origins or "",
                    allow_origin_regex=self.cors_allow_origin_regex,
                    max_age=self.cors_max_age,
                )
        except CORSConfigurationError as exc:
            logger.error(f"Failed to create CORS configuration: {exc}")
            raise


settings = Settings()  # type: ignore[call-arg]
