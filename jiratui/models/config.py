"""
Connection configuration models.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class JiraMode(str, Enum):
    """Deployment topology of the Jira instance."""

    CLOUD = "cloud"
    ONPREM = "onprem"


class JiraConfig(BaseModel):
    """
    Connection settings for one Jira instance.

    Frozen: a client snapshots its config at construction, so switching
    instance or mode means building a new config and a new client.
    """

    model_config = ConfigDict(frozen=True)

    mode: JiraMode = Field(default=JiraMode.CLOUD, description="Deployment mode")
    base_url: str = Field(default="", description="Base URL, stored without a trailing slash")
    username: str = Field(default="", description="Account email (cloud) or local username (onprem)")
    password: str = Field(
        default="",
        repr=False,
        description="API token (cloud) or password/personal access token (onprem)",
    )

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value[:-1] if value.endswith("/") else value

    @property
    def is_cloud(self) -> bool:
        return self.mode == JiraMode.CLOUD


class CachedCredentials(BaseModel):
    """Non-secret login details remembered between runs."""

    base_url: Optional[str] = Field(default=None, alias="baseUrl")
    username: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)


def create_default_config() -> JiraConfig:
    """Blank cloud configuration used before the first login."""
    return JiraConfig(mode=JiraMode.CLOUD, base_url="", username="", password="")
