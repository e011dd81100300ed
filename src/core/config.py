"""Application configuration via Pydantic settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_MAX_BODY_BYTES = 1_048_576  # 1 MiB


class Settings(BaseSettings):
    """Central configuration object loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = Field("JSON Transport API", alias="APP_NAME")
    debug: bool = Field(False, alias="DEBUG")

    max_body_bytes: int = Field(DEFAULT_MAX_BODY_BYTES, gt=0, alias="MAX_BODY_BYTES")
    json_content_type: str = Field("application/json", alias="JSON_CONTENT_TYPE")

    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_format: Literal["json", "text"] = Field("json", alias="LOG_FORMAT")


@lru_cache(1)
def get_settings() -> Settings:
    """Return a cached settings instance."""
    return Settings()

