"""Application configuration using Pydantic Settings."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Application
    app_name: str = "Playstats"
    app_version: str = "0.1.0"
    debug: bool = False

    # Server
    host: str = "0.0.0.0"
    port: int = 3000

    # Firebase Realtime Database (REST)
    firebase_database_url: str = ""
    firebase_auth_token: str = ""
    store_timeout: float | None = None  # None = wait indefinitely

    # Aggregation
    recent_signup_days: int = 7
    top_contributors_limit: int = 10

    # HTTP
    cors_origins: list[str] = ["http://localhost:3000"]
    rate_limit_default: str = "1000/hour"
    rate_limit_storage_uri: str = "memory://"
    static_dir: str = ""  # Empty = dashboard bundled with the package

    # Observability
    sentry_dsn: str = ""
    otlp_endpoint: str = ""


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
