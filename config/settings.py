"""Application settings and configuration."""

from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SERVER_URL = "https://sw5e-api.petieclark.com"


class Settings(BaseSettings):
    """Client settings loaded from environment variables (prefix ``ECHOVEIL_``)."""

    model_config = SettingsConfigDict(
        env_prefix="ECHOVEIL_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="Echoveil")
    debug: bool = Field(default=False)

    # Logging
    log_level: str = Field(default="INFO")
    log_file: Optional[str] = Field(default=None)

    # Game server
    server_url: str = Field(default=DEFAULT_SERVER_URL)
    request_timeout: float = Field(default=60.0, gt=0)
    read_timeout: float = Field(default=15.0, gt=0)

    # Background jobs
    ai_status_poll_interval: float = Field(default=60.0, gt=0)
    notes_autosave_delay: float = Field(default=1.5, ge=0)

    # Local persistence
    data_dir: Path = Field(default=Path("./data"))

    @field_validator("log_level")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {value}")
        return level

    @field_validator("server_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    def create_directories(self):
        """Create necessary directories. Should be called at application startup."""
        self.data_dir.mkdir(parents=True, exist_ok=True)


# Global settings instance
settings = Settings()
