"""Environment-driven settings via pydantic-settings.

Every field can be set with an HTTPX_RESOURCES_* environment variable or a
.env file, e.g. HTTPX_RESOURCES_BASE_URL=https://api.example.com.
"""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Client defaults for httpx-resources."""

    model_config = SettingsConfigDict(
        env_prefix="HTTPX_RESOURCES_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Client
    base_url: str = ""
    timeout_seconds: float = 10.0
    follow_redirects: bool = False

    # Observability
    log_level: str = "WARNING"
    record_url_templates: bool = False

    @field_validator("log_level", mode="before")
    @classmethod
    def upper_log_level(cls, v: str) -> str:
        return v.strip().upper() if isinstance(v, str) else v


@lru_cache
def get_settings() -> Settings:
    return Settings()
