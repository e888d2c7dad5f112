"""
Application Configuration.

Pydantic settings for type-safe environment configuration of the
analysis pipeline, the record store and the API.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.analysis.schemas import AnalysisSensitivity


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === Storage ===
    store_path: Path = Field(
        default=Path("./data/doc_checker.json"),
        description="JSON file holding reports, monitors and usage counters",
    )

    # === Analysis Run Pacing ===
    poll_interval_seconds: float = Field(
        default=1.2,
        ge=0.0,
        description="Delay between progress ticks",
    )
    settle_delay_seconds: float = Field(
        default=2.0,
        ge=0.0,
        description="Delay between reaching 100% and persisting the report",
    )
    max_tracked_runs: int = Field(
        default=100,
        ge=1,
        description="Finished runs kept for status polling before eviction",
    )
    progress_increment_min: float = Field(default=8.0, gt=0.0)
    progress_increment_max: float = Field(default=20.0, gt=0.0)

    # === Analysis ===
    default_sensitivity: AnalysisSensitivity = Field(
        default=AnalysisSensitivity.MEDIUM,
        description="Sensitivity used when a request does not specify one",
    )
    trend_window_days: int = Field(
        default=30,
        ge=1,
        description="Trailing window for the conflict trend",
    )

    # === Intake ===
    max_upload_files: int = Field(
        default=3,
        ge=1,
        description="Maximum documents per analysis batch",
    )

    # === Monitoring ===
    monitor_change_probability: float = Field(
        default=0.3,
        ge=0.0,
        le=1.0,
        description="Chance a forced check without a poller signal reports a change",
    )

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )

    # === API Configuration ===
    api_host: str = Field(
        default="0.0.0.0",
        description="API host to bind to",
    )
    api_port: int = Field(
        default=8000,
        description="API port to bind to",
    )

    @model_validator(mode="after")
    def _check_increment_range(self) -> "Settings":
        if self.progress_increment_min > self.progress_increment_max:
            raise ValueError("progress_increment_min must not exceed progress_increment_max")
        return self

    @property
    def increment_range(self) -> tuple[float, float]:
        return (self.progress_increment_min, self.progress_increment_max)

    def ensure_directories(self) -> None:
        """Create the store directory if it doesn't exist."""
        self.store_path.parent.mkdir(parents=True, exist_ok=True)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    settings = Settings()
    settings.ensure_directories()
    return settings
