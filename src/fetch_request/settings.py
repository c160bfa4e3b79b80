"""Settings powered by Pydantic BaseSettings."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from fetch_request.constants import DEFAULT_RETRY_DELAY_SECONDS


class FetchRequestSettings(BaseSettings):
    """Environment configuration (FETCH_REQUEST_* variables)."""

    model_config = SettingsConfigDict(
        env_prefix="FETCH_REQUEST_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    retry_delay_seconds: float = Field(default=DEFAULT_RETRY_DELAY_SECONDS, ge=0.0)
    log_level: str = "INFO"
    log_json: bool = True


def get_settings() -> FetchRequestSettings:
    """Get a settings instance."""
    return FetchRequestSettings()
