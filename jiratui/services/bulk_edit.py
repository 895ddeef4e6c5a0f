"""
Applying one field update across several issues.

Updates run strictly one after another so a failure leaves an exact count
of the issues that were saved before it.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence

import httpx
from loguru import logger

from jiratui.core.errors import JiraApiError
from jiratui.core.protocols import IJiraClient


@dataclass(frozen=True)
class EditableField:
    key: str
    label: str
    type: str  # "text" or "choice"


AVAILABLE_FIELDS = (
    EditableField(key="summary", label="Summary", type="text"),
    EditableField(key="severity", label="Severity", type="choice"),
)


@dataclass
class FieldValue:
    """Value chosen for one editable field."""

    field: EditableField
    value: str = ""
    options: List[Dict[str, Any]] = field(default_factory=list)
    option_index: Optional[int] = None
    field_id: Optional[str] = None

    @property
    def selected_option(self) -> Optional[Dict[str, Any]]:
        if self.option_index is None or not 0 <= self.option_index < len(self.options):
            return None
        return self.options[self.option_index]


@dataclass
class BulkUpdateResult:
    success: bool
    updated_count: int
    total: int
    failed_key: Optional[str] = None
    error: Optional[Exception] = None

    @property
    def message(self) -> str:
        if self.success:
            plural = "s" if self.total != 1 else ""
            return f"Successfully updated {self.total} issue{plural}"
        return f"Failed after {self.updated_count}/{self.total}: {self.error}"


def build_update_fields(values: Sequence[FieldValue]) -> Dict[str, Any]:
    """
    Turn field values into an update payload.

    Text fields map to literal strings (summary by name, others by field id);
    choice fields map to {"id": option_id}. Blank values are skipped.
    """
    fields: Dict[str, Any] = {}
    for fv in values:
        if fv.field.type == "text":
            if fv.field.key == "summary" and fv.value:
                fields["summary"] = fv.value
            elif fv.field_id and fv.value:
                fields[fv.field_id] = fv.value
        elif fv.field.type == "choice" and fv.field_id:
            selected = fv.selected_option
            if selected and selected.get("id"):
                fields[fv.field_id] = {"id": selected["id"]}
    return fields


async def bulk_update_issues(
    client: IJiraClient,
    issue_keys: Sequence[str],
    fields: Dict[str, Any],
    on_progress: Optional[Callable[[str, int, int], None]] = None,
) -> BulkUpdateResult:
    """
    Apply the same update to each issue in order, stopping at the first failure.

    Args:
        client: Jira client
        issue_keys: Issues to update
        fields: Update payload passed to update_issue
        on_progress: Called as (issue_key, index, total) before each update

    Returns:
        BulkUpdateResult with the number of confirmed updates

    Raises:
        ValueError: If there is nothing to update
    """
    if not fields:
        raise ValueError("No changes to save")

    total = len(issue_keys)
    updated = 0
    for index, issue_key in enumerate(issue_keys):
        if on_progress:
            on_progress(issue_key, index, total)
        try:
            await client.update_issue(issue_key, fields)
        except (JiraApiError, httpx.HTTPError) as e:
            logger.error(f"Bulk update stopped at {issue_key} after {updated}/{total}: {e}")
            return BulkUpdateResult(
                success=False, updated_count=updated, total=total, failed_key=issue_key, error=e
            )
        updated += 1

    logger.info(f"Bulk update finished: {updated}/{total} issues")
    return BulkUpdateResult(success=True, updated_count=updated, total=total)
