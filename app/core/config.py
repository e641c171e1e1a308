"""Application configuration using pydantic-settings."""
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    env: str = "local"
    app_name: str = "rfp-search-api"
    allowed_origins: str = "*"
    log_level: str = "INFO"

    # TED (EU Tenders Electronic Daily)
    ted_mode: str = Field("official", validation_alias="TED_MODE")  # official | off
    ted_search_base_url: str = Field(
        "https://api.ted.europa.eu",
        validation_alias="TED_SEARCH_BASE_URL",
    )
    # No timeout by default: callers impose their own deadline around a search.
    ted_timeout_seconds: Optional[float] = Field(None, validation_alias="TED_TIMEOUT_SECONDS")

    @field_validator("ted_mode")
    @classmethod
    def normalize_ted_mode(cls, v: str) -> str:
        """Lowercase TED_MODE and reject unknown modes."""
        mode = (v or "official").strip().lower()
        if mode not in ("official", "off"):
            raise ValueError("TED_MODE must be 'official' or 'off'")
        return mode

    @field_validator("ted_search_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return (v or "").strip().rstrip("/")

    @property
    def allowed_origins_list(self) -> list[str]:
        """Get allowed origins as a list."""
        if self.allowed_origins == "*":
            return ["*"]
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]


settings = Settings()
