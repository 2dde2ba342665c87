"""Application configuration."""
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine settings loaded from environment variables."""

    # Remote meal service
    api_base_url: str = "http://localhost:3001/api"
    request_timeout: float = 10.0

    # Retry policy
    max_attempts: int = 3
    backoff: str = "none"  # none, exponential
    backoff_base: float = 0.5
    backoff_max: float = 8.0

    # Session token store
    token_file: str = ".flightmeals/session.json"

    # Shopper sessions (also the session cookie lifetime)
    session_ttl_seconds: int = 86400  # 24 hours

    # Logging
    log_level: str = "INFO"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )


settings = Settings()
