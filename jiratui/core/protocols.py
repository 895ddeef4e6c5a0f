"""
Protocol interfaces for dependency inversion.
Defines contracts for the Jira client and its cache collaborators so that
calling code stays independent of the deployment mode.
"""

from typing import Any, Dict, List, Optional, Protocol

from jiratui.models.config import CachedCredentials, JiraConfig
from jiratui.models.jira import SearchOptions


class IJiraClient(Protocol):
    """Interface shared by the cloud and on-prem Jira clients."""

    config: JiraConfig

    @property
    def is_cloud(self) -> bool:
        ...

    async def validate_connection(self) -> None:
        """
        Confirm credentials and reachability by fetching the current user.

        Raises:
            JiraApiError: If the server rejects the request
        """
        ...

    async def get_projects(self) -> List[Dict[str, Any]]:
        """
        List projects visible to the credential.

        Returns:
            Flat list of project dictionaries
        """
        ...

    async def search_issues(self, options: SearchOptions) -> Dict[str, Any]:
        """
        Run a JQL search.

        Args:
            options: JQL, pagination and field selection

        Returns:
            Search response with startAt, maxResults, total and issues
        """
        ...

    async def get_project_issues(
        self, project_key: str, options: Optional[SearchOptions] = None
    ) -> Dict[str, Any]:
        """
        Search the issues of one project, newest first.

        Args:
            project_key: Project key (e.g., 'DEMO')
            options: Pagination and fields; any jql given here is replaced

        Returns:
            Search response
        """
        ...

    async def update_issue(self, issue_key: str, fields: Dict[str, Any]) -> None:
        """
        Apply a partial field update.

        Args:
            issue_key: Issue key (e.g., 'DEMO-1')
            fields: Field id/name to new value
        """
        ...

    async def get_field_options(
        self, field_name: str, project_key: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        """
        Allowed values of an enumerated field.

        Returns:
            List of {id, value} options, empty for unsupported fields
        """
        ...

    async def get_field_id(self, field_name: str) -> Optional[str]:
        """
        Resolve a field name to its id, case-insensitively.

        Returns:
            Field id, or None if not found or the lookup failed
        """
        ...

    async def get_fields(self) -> List[Dict[str, Any]]:
        """Return the full field catalog."""
        ...

    async def get_issue_edit_meta(self, issue_key: str) -> Dict[str, Any]:
        """Return the edit metadata document of an issue."""
        ...


class IFieldsCache(Protocol):
    """Interface for the edit-metadata cache."""

    def put(self, key: Any, editmeta: Dict[str, Any]) -> None:
        ...

    def get(self, key: Any) -> Optional[Dict[str, Dict[str, Any]]]:
        ...

    def find_field_id_by_name(self, key: Any, name: str) -> Optional[str]:
        ...

    def get_allowed_values(self, key: Any, field_name_or_id: str) -> Optional[List[Dict[str, Any]]]:
        ...


class ICredentialStore(Protocol):
    """Interface for the cached login details."""

    def load(self) -> CachedCredentials:
        ...

    def save(self, credentials: CachedCredentials) -> None:
        ...
