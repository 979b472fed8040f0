"""Configuration settings for haulbooks."""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Flat settings read from environment variables or a .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Local cache
    db_path: Optional[str] = Field(default=None, validation_alias="HAULBOOKS_DB_PATH")

    # Remote store
    supabase_url: str = Field(default="", validation_alias="SUPABASE_URL")
    supabase_anon_key: SecretStr = Field(
        default=SecretStr(""), validation_alias="SUPABASE_ANON_KEY"
    )
    supabase_access_token: Optional[SecretStr] = Field(
        default=None, validation_alias="SUPABASE_ACCESS_TOKEN"
    )
    remote_timeout: float = Field(default=30.0, validation_alias="REMOTE_TIMEOUT")

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING", validation_alias="LOG_LEVEL"
    )
    log_format: Literal["json", "console"] = Field(
        default="console", validation_alias="LOG_FORMAT"
    )

    @property
    def remote_configured(self) -> bool:
        """Whether a usable remote URL and API key are present."""
        # Anon keys are long JWTs; anything short is a placeholder.
        return self.supabase_url.startswith("http") and len(
            self.supabase_anon_key.get_secret_value()
        ) > 20


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
