"""
Configuration settings for the studydesk dashboard.

Uses Pydantic Settings for environment variable management with .env file support.
Every field can be overridden with a ``STUDYDESK_`` prefixed environment variable.
"""
from __future__ import annotations

from datetime import date
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="STUDYDESK_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Local Storage
    # ========================================
    data_dir: Path = Field(
        default=Path.home() / ".studydesk",
        description="Directory holding one JSON file per storage key",
    )
    dashboard_key: str = Field(
        default="upsc-dashboard-v1",
        description="Storage key of the dashboard snapshot",
    )
    preferences_key: str = Field(
        default="readerSettings",
        description="Storage key of the reader display preferences",
    )
    feed_preferences_key: str = Field(
        default="rss_preferences_v2",
        description="Storage key of the enabled news sources",
    )

    # ========================================
    # Remote Backup (GitHub contents API)
    # ========================================
    backup_token_key: str = Field(
        default="gh_token",
        description="Storage key of the GitHub token",
    )
    backup_repo_key: str = Field(
        default="gh_repo",
        description="Storage key of the backup repository (owner/repo)",
    )
    github_api_url: str = Field(
        default="https://api.github.com",
        description="GitHub REST API base URL",
    )
    backup_path: str = Field(
        default="upsc_dashboard_backup.json",
        description="Path of the backup file inside the repository",
    )
    backup_timeout_seconds: float = Field(
        default=30.0,
        description="HTTP timeout for backup requests",
    )

    # ========================================
    # Dashboard Behaviour
    # ========================================
    habit_window_days: int = Field(
        default=14,
        description="Days shown in the habit consistency strip",
    )
    exam_date: date = Field(
        default=date(2027, 5, 26),
        description="Exam day used by the countdown",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING",
        description="Logging verbosity level",
    )
    log_file: str | None = Field(
        default=None,
        description="Log file path (None for stderr only)",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
