"""
jiratui - terminal client for Jira Cloud and Jira Data Center.
"""

from jiratui.api.jira_client import (
    CloudJiraClient,
    DataCenterJiraClient,
    create_jira_client,
)
from jiratui.core.errors import JiraApiError, JiraError, JiraTimeoutError
from jiratui.models.config import JiraConfig, JiraMode

__version__ = "0.1.0"

__all__ = [
    'CloudJiraClient',
    'DataCenterJiraClient',
    'create_jira_client',
    'JiraApiError',
    'JiraError',
    'JiraTimeoutError',
    'JiraConfig',
    'JiraMode',
]
