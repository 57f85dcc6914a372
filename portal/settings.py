from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # App
    app_env: str = "dev"
    log_level: str = "INFO"
    app_name: str = "Posterns"
    app_url: str = "http://localhost:3000"

    # Infra
    database_url: str = "postgresql://app:app@db:5432/app"
    redis_url: str = "redis://redis:6379/0"
    redis_connect_timeout_seconds: float = 3.0
    email_api_url: str = "http://mail-api:8025"
    email_api_key: str = ""
    email_from: str = "noreply@posterns.lv"
    email_timeout_seconds: float = 5.0

    # Security / policies
    bcrypt_rounds: int = 12
    password_min_length: int = 8
    session_ttl_seconds: int = 30 * 24 * 60 * 60
    cron_secret: str | None = None

    # Rate limiting
    rate_limit_cleanup_interval_seconds: int = 300
    rate_limit_max_entries: int = 10_000
    rate_limit_max_window_ms: int = 60_000

    # Cleanup worker
    cleanup_interval_seconds: int = 24 * 60 * 60

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
