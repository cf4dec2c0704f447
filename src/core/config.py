"""Application configuration management using Pydantic Settings."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings can be overridden via environment variables.
    Required settings will raise validation errors if not provided.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="boardroom-api", description="Application name")
    app_env: str = Field(default="development", description="Environment (development/staging/production)")
    debug: bool = Field(default=False, description="Enable debug mode")

    # Server
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8080, description="Server port")

    # CORS
    cors_origins: str = Field(
        default="http://localhost:3000",
        description="Comma-separated list of allowed CORS origins",
    )

    # Supabase (storage)
    supabase_url: str = Field(..., description="Supabase project URL")
    supabase_secret_key: str = Field(..., description="Supabase secret key for backend operations")
    storage_timeout_seconds: float = Field(default=10.0, description="Timeout applied to every storage request")

    # Identity provider
    identity_signing_key_jwk: str = Field(..., description="Identity provider public signing key (JWK JSON string)")
    identity_jwt_algorithms: str = Field(default="ES256", description="Comma-separated accepted JWT algorithms")
    identity_jwt_audience: str | None = Field(default=None, description="Expected JWT audience, if any")
    identity_webhook_secret: str = Field(default="", description="Shared secret for identity provider webhooks")

    # Real-time gateway
    realtime_auth_timeout_seconds: float = Field(
        default=5.0,
        description="Maximum time allowed for verifying a WebSocket credential",
    )

    # Email (Resend)
    resend_api_key: str = Field(default="", description="Resend API key for sending emails")
    email_from_address: str = Field(
        default="Boardroom <noreply@boardroom.app>",
        description="From address for transactional emails",
    )

    # Frontend
    frontend_url: str = Field(
        default="http://localhost:3000",
        description="Frontend application URL for email links",
    )

    # Governance limits
    max_custom_roles: int = Field(default=5, description="Maximum custom roles per company")
    invitation_expiration_days: int = Field(default=7, description="Days until an invitation expires")

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins string into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def jwt_algorithms_list(self) -> list[str]:
        """Parse accepted JWT algorithms into a list."""
        return [alg.strip() for alg in self.identity_jwt_algorithms.split(",") if alg.strip()]

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.app_env == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings singleton.

    Returns:
        Settings: Application settings instance.

    Note:
        Settings are cached using lru_cache for performance.
        Call get_settings.cache_clear() to reload settings.
    """
    return Settings()
