"""Application settings using Pydantic."""
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Database
    database_url: str = Field(
        default="sqlite:///volunteer_match.db",
        description="SQLAlchemy database URL",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Root log level (DEBUG, INFO, WARNING, ERROR)",
    )
    log_file: Optional[str] = Field(
        default=None,
        description="Optional path for the rotating log file",
    )

    # Ranking
    min_match_score: float = Field(
        default=0,
        ge=0,
        le=100,
        description="Opportunities scoring below this are left out of rankings",
    )
    opportunity_fetch_limit: int = Field(
        default=50,
        gt=0,
        description="How many active opportunities to score per ranking",
    )

    # Paths
    config_dir: Path = Field(
        default=Path(__file__).parent,
        description="Configuration directory",
    )

    @property
    def project_root(self) -> Path:
        """Project root directory."""
        return self.config_dir.parent


# Global settings instance
settings = Settings()
