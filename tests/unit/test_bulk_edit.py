"""
Unit tests for sequential bulk updates.
"""

import asyncio

import pytest

from jiratui.core.errors import JiraApiError
from jiratui.services.bulk_edit import (
    AVAILABLE_FIELDS,
    FieldValue,
    build_update_fields,
    bulk_update_issues,
)

SUMMARY, SEVERITY = AVAILABLE_FIELDS


class RecordingClient:
    """Fake client that fails on chosen keys and tracks concurrency."""

    def __init__(self, fail_on=()):
        self.fail_on = set(fail_on)
        self.calls = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def update_issue(self, issue_key, fields):
        self.calls.append(issue_key)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(0)
            if issue_key in self.fail_on:
                raise JiraApiError("JIRA API Error: 400 Bad Request", 400, '{"errors":{}}')
        finally:
            self.in_flight -= 1


class TestBuildUpdateFields:
    def test_summary_and_choice(self):
        options = [{"id": "1", "value": "1 - Critical"}, {"id": "2", "value": "2 - High"}]
        values = [
            FieldValue(field=SUMMARY, value="New title"),
            FieldValue(field=SEVERITY, options=options, option_index=1, field_id="customfield_10100"),
        ]

        assert build_update_fields(values) == {
            "summary": "New title",
            "customfield_10100": {"id": "2"},
        }

    def test_blank_and_unresolved_values_are_skipped(self):
        values = [
            FieldValue(field=SUMMARY, value=""),
            FieldValue(field=SEVERITY, options=[{"id": "1", "value": "x"}], option_index=0, field_id=None),
            FieldValue(field=SEVERITY, options=[], option_index=None, field_id="customfield_1"),
        ]

        assert build_update_fields(values) == {}


@pytest.mark.asyncio
async def test_all_updates_succeed_in_order():
    client = RecordingClient()
    progress = []

    result = await bulk_update_issues(
        client, ["DEMO-1", "DEMO-2", "DEMO-3"], {"summary": "X"},
        on_progress=lambda key, i, total: progress.append((key, i, total)),
    )

    assert result.success is True
    assert result.updated_count == 3
    assert client.calls == ["DEMO-1", "DEMO-2", "DEMO-3"]
    assert client.max_in_flight == 1
    assert progress[0] == ("DEMO-1", 0, 3)
    assert result.message == "Successfully updated 3 issues"


@pytest.mark.asyncio
async def test_stops_at_first_failure():
    client = RecordingClient(fail_on={"DEMO-2"})

    result = await bulk_update_issues(client, ["DEMO-1", "DEMO-2", "DEMO-3"], {"summary": "X"})

    assert result.success is False
    assert result.updated_count == 1
    assert result.failed_key == "DEMO-2"
    assert isinstance(result.error, JiraApiError)
    assert client.calls == ["DEMO-1", "DEMO-2"]
    assert result.message.startswith("Failed after 1/3")


@pytest.mark.asyncio
async def test_empty_payload_is_rejected():
    with pytest.raises(ValueError):
        await bulk_update_issues(RecordingClient(), ["DEMO-1"], {})
