"""
Typed views over Jira REST payloads.

The client hands back server JSON untouched; these models are for display
code that wants attribute access. Unknown keys are kept, nothing beyond the
identifying fields is required.
"""

import re
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class _JiraModel(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)


class JiraUser(_JiraModel):
    """A user record. Cloud identifies users by accountId, on-prem by name."""

    self_link: Optional[str] = Field(default=None, alias="self")
    display_name: Optional[str] = Field(default=None, alias="displayName")
    email_address: Optional[str] = Field(default=None, alias="emailAddress")
    account_id: Optional[str] = Field(default=None, alias="accountId")
    name: Optional[str] = None


class StatusCategory(_JiraModel):
    id: Optional[int] = None
    key: Optional[str] = None
    name: Optional[str] = None
    color_name: Optional[str] = Field(default=None, alias="colorName")


class JiraStatus(_JiraModel):
    self_link: Optional[str] = Field(default=None, alias="self")
    id: Optional[str] = None
    name: str = ""
    status_category: Optional[StatusCategory] = Field(default=None, alias="statusCategory")


class JiraPriority(_JiraModel):
    id: Optional[str] = None
    name: str = ""


class JiraIssueType(_JiraModel):
    id: Optional[str] = None
    name: str = ""
    icon_url: Optional[str] = Field(default=None, alias="iconUrl")


class JiraProject(_JiraModel):
    self_link: Optional[str] = Field(default=None, alias="self")
    id: str
    key: str
    name: str = ""
    project_type_key: Optional[str] = Field(default=None, alias="projectTypeKey")


class JiraIssueFields(_JiraModel):
    summary: str = ""
    status: Optional[JiraStatus] = None
    created: Optional[str] = None
    updated: Optional[str] = None
    assignee: Optional[JiraUser] = None
    reporter: Optional[JiraUser] = None
    priority: Optional[JiraPriority] = None
    issuetype: Optional[JiraIssueType] = None
    project: Optional[JiraProject] = None


class JiraIssue(_JiraModel):
    id: str
    key: str
    self_link: Optional[str] = Field(default=None, alias="self")
    fields: JiraIssueFields = Field(default_factory=JiraIssueFields)


class JiraSearchResponse(_JiraModel):
    start_at: int = Field(default=0, alias="startAt")
    max_results: int = Field(default=0, alias="maxResults")
    total: int = 0
    issues: List[JiraIssue] = Field(default_factory=list)

    @property
    def has_more(self) -> bool:
        """True when the server reports issues beyond this page."""
        return self.start_at + len(self.issues) < self.total


class JiraField(_JiraModel):
    """Entry of the field catalog (GET /field)."""

    id: str
    name: str = ""
    custom: Optional[bool] = None
    schema_: Optional[Dict[str, Any]] = Field(default=None, alias="schema")


class EditMetaField(_JiraModel):
    name: str = ""
    required: bool = False
    operations: List[str] = Field(default_factory=list)
    allowed_values: Optional[List[Dict[str, Any]]] = Field(default=None, alias="allowedValues")
    schema_: Optional[Dict[str, Any]] = Field(default=None, alias="schema")


class EditMetaResponse(_JiraModel):
    fields: Dict[str, EditMetaField] = Field(default_factory=dict)


class SearchOptions(BaseModel):
    """Pagination and field selection for a JQL search."""

    jql: Optional[str] = None
    start_at: Optional[int] = None
    max_results: Optional[int] = None
    fields: Optional[List[str]] = None


class FieldOption(BaseModel):
    """Selectable value of an enumerated field. Identity is id, display is value."""

    id: str
    value: str
    name: Optional[str] = None


def get_user_identifier(user: Union[JiraUser, Mapping[str, Any], None], is_cloud: bool) -> str:
    """
    Return the mode-appropriate identity of a user.

    Cloud uses the opaque accountId, on-prem the local username. Missing
    values yield an empty string.
    """
    if user is None:
        return ""
    if isinstance(user, JiraUser):
        value = user.account_id if is_cloud else user.name
    else:
        value = user.get("accountId") if is_cloud else user.get("name")
    return value or ""


_TZ_NO_COLON = re.compile(r"([+-]\d{2})(\d{2})$")


def parse_jira_datetime(value: str) -> Optional[datetime]:
    """Parse Jira timestamps such as 2024-01-05T15:30:00.000+0000."""
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    text = _TZ_NO_COLON.sub(r"\1:\2", text)
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def format_datetime(iso_string: str) -> str:
    """Format an ISO-8601 timestamp for display, e.g. 'Jan 05, 2024, 03:30 PM'."""
    parsed = parse_jira_datetime(iso_string) if iso_string else None
    if parsed is None:
        return iso_string
    return parsed.strftime("%b %d, %Y, %I:%M %p")
