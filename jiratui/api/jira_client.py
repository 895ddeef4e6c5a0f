"""
Jira client for cloud and on-prem (Data Center) deployments.

Both variants expose the same operations; every dialect difference (API
version, project pagination envelope, search method, option discovery)
lives in the variant class.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import httpx
from loguru import logger

from jiratui.core.errors import JiraApiError
from jiratui.infrastructure.http_client import JiraTransport
from jiratui.models.config import JiraConfig, JiraMode
from jiratui.models.jira import SearchOptions

DEFAULT_SEARCH_FIELDS = ["summary", "status", "created"]

# Used when the live severity lookup is unavailable
SEVERITY_FALLBACK_OPTIONS = (
    {"id": "1", "value": "1 - Critical"},
    {"id": "2", "value": "2 - High"},
    {"id": "3", "value": "3 - Medium"},
    {"id": "4", "value": "4 - Low"},
    {"id": "5", "value": "5 - Trivial"},
)


def severity_fallback_options() -> List[Dict[str, Any]]:
    return [dict(option) for option in SEVERITY_FALLBACK_OPTIONS]


def _expect(payload: Any, kind: type, what: str) -> Any:
    """Return payload if it has the expected JSON shape, else raise ValueError."""
    if not isinstance(payload, kind):
        raise ValueError(f"Unexpected {what} payload: {type(payload).__name__}")
    return payload


def _option(value: Any) -> Dict[str, Any]:
    value = _expect(value, dict, "option")
    return {"id": str(value.get("id")), "value": value.get("value") or value.get("name", "")}


class BaseJiraClient(ABC):
    """Shared transport, auth and project-issue search for both variants."""

    api_version: str = ""

    def __init__(
        self,
        config: JiraConfig,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize Jira client.

        Args:
            config: Frozen connection settings
            timeout: Request deadline in seconds (defaults to settings)
            transport: Optional httpx transport override (tests)
        """
        self.config = config
        self._http = JiraTransport(config, timeout=timeout, transport=transport)

    @property
    def is_cloud(self) -> bool:
        return self.config.is_cloud

    @property
    def api_base(self) -> str:
        return f"/rest/api/{self.api_version}"

    async def request(self, endpoint: str, **kwargs: Any) -> Any:
        return await self._http.request(endpoint, **kwargs)

    async def validate_connection(self) -> None:
        logger.info(f"Validating connection ({self.config.mode.value})")
        await self.request(f"{self.api_base}/myself")

    async def get_project_issues(
        self, project_key: str, options: Optional[SearchOptions] = None
    ) -> Dict[str, Any]:
        options = options or SearchOptions()
        logger.info(
            f"Fetching project issues for {project_key} "
            f"(startAt={options.start_at}, maxResults={options.max_results}, fields={options.fields})"
        )
        # project_key is embedded verbatim, keys are expected to be plain [A-Z0-9_]
        return await self.search_issues(
            options.model_copy(
                update={
                    "jql": f"project = {project_key} ORDER BY created DESC",
                    "fields": options.fields or list(DEFAULT_SEARCH_FIELDS),
                }
            )
        )

    async def update_issue(self, issue_key: str, fields: Dict[str, Any]) -> None:
        logger.info(f"Updating issue {issue_key} ({self.config.mode.value})")
        await self.request(
            f"{self.api_base}/issue/{issue_key}", method="PUT", json={"fields": fields}
        )

    async def get_fields(self) -> List[Dict[str, Any]]:
        return await self.request(f"{self.api_base}/field")

    async def get_field_id(self, field_name: str) -> Optional[str]:
        # ValueError covers non-JSON 2xx bodies (SSO pages) and malformed catalogs
        try:
            fields = _expect(await self.get_fields(), list, "field catalog")
        except (JiraApiError, httpx.HTTPError, ValueError) as e:
            logger.debug(f"Field id lookup for '{field_name}' failed: {e}")
            return None

        wanted = field_name.lower()
        for field in fields:
            if isinstance(field, dict) and str(field.get("name", "")).lower() == wanted:
                return field.get("id")
        return None

    async def get_issue_edit_meta(self, issue_key: str) -> Dict[str, Any]:
        return await self.request(f"{self.api_base}/issue/{issue_key}/editmeta")

    async def get_field_options(
        self, field_name: str, project_key: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        if field_name.lower() != "severity":
            return []
        try:
            options = await self._fetch_severity_options(project_key)
        except (JiraApiError, httpx.HTTPError, ValueError) as e:
            logger.warning(f"Severity lookup failed, using fallback options: {e}")
            return severity_fallback_options()
        return options or severity_fallback_options()

    @abstractmethod
    async def get_projects(self) -> List[Dict[str, Any]]:
        ...

    @abstractmethod
    async def search_issues(self, options: SearchOptions) -> Dict[str, Any]:
        ...

    @abstractmethod
    async def _fetch_severity_options(self, project_key: Optional[str]) -> List[Dict[str, Any]]:
        """Live severity options, or an empty list when the field is unknown."""


class CloudJiraClient(BaseJiraClient):
    """Jira Cloud, REST API v3."""

    api_version = "3"

    async def get_projects(self) -> List[Dict[str, Any]]:
        logger.info("Fetching projects (cloud)")
        # Single page: instances with more than 100 projects are truncated
        response = await self.request(
            f"{self.api_base}/project/search", params={"maxResults": 100}
        )
        projects = (response or {}).get("values", [])
        logger.info(f"Fetched {len(projects)} projects (cloud)")
        return projects

    async def search_issues(self, options: SearchOptions) -> Dict[str, Any]:
        params: Dict[str, Any] = {}
        if options.jql:
            params["jql"] = options.jql
        if options.start_at is not None:
            params["startAt"] = str(options.start_at)
        if options.max_results is not None:
            params["maxResults"] = str(options.max_results)
        params["fields"] = ",".join(options.fields or DEFAULT_SEARCH_FIELDS)

        logger.debug(
            f"Searching issues (cloud): jql={options.jql!r} "
            f"startAt={options.start_at} maxResults={options.max_results}"
        )
        return await self.request(f"{self.api_base}/search", params=params)

    async def _fetch_severity_options(self, project_key: Optional[str]) -> List[Dict[str, Any]]:
        field_id = await self.get_field_id("Severity")
        if not field_id:
            return []
        response = _expect(
            await self.request(f"{self.api_base}/field/{field_id}/context/default/option"),
            dict,
            "field option",
        )
        return [_option(value) for value in _expect(response.get("values", []), list, "field option")]


class DataCenterJiraClient(BaseJiraClient):
    """Jira Server / Data Center, REST API v2."""

    api_version = "2"

    async def get_projects(self) -> List[Dict[str, Any]]:
        logger.info("Fetching projects (onprem)")
        projects = await self.request(f"{self.api_base}/project") or []
        logger.info(f"Fetched {len(projects)} projects (onprem)")
        return projects

    async def search_issues(self, options: SearchOptions) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "jql": options.jql or "",
            "startAt": options.start_at if options.start_at is not None else 0,
            "maxResults": options.max_results if options.max_results is not None else 50,
        }
        if options.fields:
            body["fields"] = list(options.fields)

        logger.debug(
            f"Searching issues (onprem): jql={options.jql!r} "
            f"startAt={options.start_at} maxResults={options.max_results}"
        )
        return await self.request(f"{self.api_base}/search", method="POST", json=body)

    async def _fetch_severity_options(self, project_key: Optional[str]) -> List[Dict[str, Any]]:
        response = _expect(
            await self.request(
                f"{self.api_base}/issue/createmeta",
                params={"expand": "projects.issuetypes.fields"},
            ),
            dict,
            "createmeta",
        )
        for project in _expect(response.get("projects", []), list, "createmeta projects"):
            project = _expect(project, dict, "createmeta project")
            if project_key and project.get("key") != project_key:
                continue
            for issue_type in _expect(project.get("issuetypes", []), list, "createmeta issuetypes"):
                fields = _expect(_expect(issue_type, dict, "issuetype").get("fields") or {}, dict, "fields")
                for field in fields.values():
                    if not isinstance(field, dict) or str(field.get("name", "")).lower() != "severity":
                        continue
                    allowed = _expect(field.get("allowedValues") or [], list, "allowedValues")
                    if allowed:
                        return [_option(value) for value in allowed]
        return []


def create_jira_client(
    config: JiraConfig,
    timeout: Optional[float] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> BaseJiraClient:
    """Build the client variant matching config.mode."""
    if config.mode == JiraMode.CLOUD:
        return CloudJiraClient(config, timeout=timeout, transport=transport)
    return DataCenterJiraClient(config, timeout=timeout, transport=transport)
