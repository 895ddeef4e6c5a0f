"""
Configuration settings for the application.
Loads environment variables and provides type-safe configuration.
"""

from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_dir: str = Field(default="./logs", description="Directory for timestamped log files")

    # HTTP
    request_timeout: float = Field(default=10.0, description="Per-request deadline in seconds")

    # Local state (credential cache, edit-metadata cache)
    config_dir: str = Field(
        default=str(Path.home() / ".config" / "jiratui"),
        description="Directory for cached credentials and field metadata",
    )

    # Connection defaults (optional, the CLI falls back to cached credentials)
    jira_mode: Optional[str] = Field(default=None, description="Deployment mode: 'cloud' or 'onprem'")
    jira_base_url: Optional[str] = Field(default=None, description="Jira base URL")
    jira_username: Optional[str] = Field(default=None, description="Jira username or account email")
    jira_password: Optional[str] = Field(
        default=None, description="API token (cloud) or password/personal access token (onprem)"
    )


# Global settings instance
settings = Settings()
