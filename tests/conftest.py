"""
Pytest configuration and fixtures.
"""

import json
import os
import re
import tempfile
from typing import Callable, Dict, List, Optional

import httpx
import pytest

# Keep caches and logs out of the user's home directory
_TEST_HOME = tempfile.mkdtemp(prefix="jiratui-tests-")
os.environ["CONFIG_DIR"] = os.path.join(_TEST_HOME, "config")
os.environ["LOG_DIR"] = os.path.join(_TEST_HOME, "logs")
os.environ["REQUEST_TIMEOUT"] = "10"
for _var in ("JIRA_MODE", "JIRA_BASE_URL", "JIRA_USERNAME", "JIRA_PASSWORD"):
    os.environ.pop(_var, None)

from jiratui.models.config import JiraConfig, JiraMode  # noqa: E402


@pytest.fixture
def cloud_config() -> JiraConfig:
    return JiraConfig(
        mode=JiraMode.CLOUD,
        base_url="https://example.atlassian.net",
        username="bob@example.com",
        password="api-token",
    )


@pytest.fixture
def onprem_config() -> JiraConfig:
    return JiraConfig(
        mode=JiraMode.ONPREM,
        base_url="https://jira.example.com",
        username="alice",
        password="pat123",
    )


def make_issue(key: str, summary: str, issue_id: str = "10001") -> Dict:
    return {
        "id": issue_id,
        "key": key,
        "self": f"https://jira.example.com/rest/api/2/issue/{issue_id}",
        "fields": {
            "summary": summary,
            "status": {"name": "To Do", "statusCategory": {"id": 2, "key": "new", "name": "To Do"}},
            "created": "2024-01-01T10:00:00.000+0000",
            "updated": "2024-01-05T15:30:00.000+0000",
            "assignee": {"accountId": "5b10a2844c20165700ede21g", "name": "alice", "displayName": "Alice"},
        },
    }


@pytest.fixture
def sample_issues() -> List[Dict]:
    return [
        make_issue("DEMO-1", "First issue", "10001"),
        make_issue("DEMO-2", "Second issue", "10002"),
        make_issue("DEMO-3", "Third issue", "10003"),
    ]


@pytest.fixture
def sample_editmeta() -> Dict:
    return {
        "fields": {
            "summary": {
                "name": "Summary",
                "required": True,
                "operations": ["set"],
                "schema": {"type": "string", "system": "summary"},
            },
            "customfield_10100": {
                "name": "Severity",
                "required": False,
                "operations": ["set"],
                "schema": {"type": "option", "custom": "select"},
                "allowedValues": [
                    {"id": "201", "value": "Blocker"},
                    {"id": "202", "value": "Major"},
                ],
            },
        }
    }


class StubJira:
    """
    In-memory Jira serving both REST dialects through httpx.MockTransport.

    Routes can be overridden per test with `routes[(method, path)] = handler`.
    """

    KEY_FILTER = re.compile(r"key\s*=\s*([A-Z][A-Z0-9_]*-\d+)")

    def __init__(self, issues: Optional[List[Dict]] = None):
        self.issues: Dict[str, Dict] = {i["key"]: i for i in (issues or [])}
        self.requests: List[httpx.Request] = []
        self.routes: Dict[tuple, Callable[[httpx.Request], httpx.Response]] = {}

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def calls(self, method: str, path: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]

    def _search(self, jql: str, start_at: int, max_results: int) -> Dict:
        issues = list(self.issues.values())
        match = self.KEY_FILTER.search(jql or "")
        if match:
            issues = [i for i in issues if i["key"] == match.group(1)]
        page = issues[start_at:start_at + max_results]
        return {"startAt": start_at, "maxResults": max_results, "total": len(issues), "issues": page}

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        route = self.routes.get((request.method, path))
        if route:
            return route(request)

        version_match = re.match(r"^/rest/api/(\d)(/.*)$", path)
        if not version_match:
            return httpx.Response(404, text="Not Found")
        rest = version_match.group(2)

        if request.method == "GET" and rest == "/myself":
            return httpx.Response(200, json={"name": "alice", "accountId": "abc"})

        if request.method == "GET" and rest == "/search":
            params = request.url.params
            return httpx.Response(200, json=self._search(
                params.get("jql", ""),
                int(params.get("startAt", 0)),
                int(params.get("maxResults", 50)),
            ))

        if request.method == "POST" and rest == "/search":
            body = json.loads(request.content)
            return httpx.Response(200, json=self._search(
                body.get("jql", ""), body.get("startAt", 0), body.get("maxResults", 50)
            ))

        issue_match = re.match(r"^/issue/([A-Z][A-Z0-9_]*-\d+)$", rest)
        if request.method == "PUT" and issue_match:
            key = issue_match.group(1)
            if key not in self.issues:
                return httpx.Response(404, text='{"errorMessages":["Issue does not exist"]}')
            updates = json.loads(request.content)["fields"]
            self.issues[key]["fields"].update(updates)
            return httpx.Response(204)

        return httpx.Response(404, text="Not Found")


@pytest.fixture
def stub_jira(sample_issues) -> StubJira:
    return StubJira(sample_issues)


@pytest.fixture
def stub_factory() -> Callable[..., StubJira]:
    return StubJira
