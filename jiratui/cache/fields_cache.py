"""
Persistent cache of field edit metadata.

Entries are keyed by (base_url, mode, project, issue type) and never
expire: edit metadata for a project/issue-type pair is treated as static.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from loguru import logger
from pydantic import BaseModel, ConfigDict

from jiratui.config.settings import settings
from jiratui.models.config import JiraMode

CACHE_VERSION = 1


class ProjectIssueTypeKey(BaseModel):
    """Identifies one edit-metadata entry."""

    model_config = ConfigDict(frozen=True)

    base_url: str
    mode: JiraMode
    project_key: str
    issue_type: str


def make_key(key: ProjectIssueTypeKey) -> str:
    return f"{key.base_url}|{key.mode.value}|{key.project_key}|{key.issue_type}"


class FieldsCache:
    """
    JSON file cache of normalized edit metadata.

    File layout: {"version": 1, "entries": {key: {field_id: {id, name, allowedValues}}}}
    """

    def __init__(self, cache_file: Optional[Union[str, Path]] = None):
        """
        Initialize fields cache.

        Args:
            cache_file: Path to the JSON file. Defaults to <config_dir>/fields-cache.json
        """
        self.cache_file = Path(cache_file) if cache_file else Path(settings.config_dir) / "fields-cache.json"

    def _load_raw(self) -> Dict[str, Any]:
        try:
            if self.cache_file.exists():
                data = json.loads(self.cache_file.read_text(encoding="utf-8"))
                if isinstance(data, dict) and isinstance(data.get("entries"), dict):
                    return data
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable fields cache {self.cache_file}: {e}")
        return {"version": CACHE_VERSION, "entries": {}}

    def _save_raw(self, data: Dict[str, Any]) -> None:
        try:
            self.cache_file.parent.mkdir(parents=True, exist_ok=True)
            self.cache_file.write_text(json.dumps(data, indent=2), encoding="utf-8")
        except OSError as e:
            logger.error(f"Failed to write fields cache {self.cache_file}: {e}")

    def put(self, key: ProjectIssueTypeKey, editmeta: Dict[str, Any]) -> None:
        """
        Store the edit metadata of a project/issue type.

        Args:
            key: Cache key
            editmeta: Server editmeta document ({"fields": {id: {...}}})
        """
        fields: Dict[str, Dict[str, Any]] = {}
        for field_id, field in (editmeta.get("fields") or {}).items():
            fields[field_id] = {
                "id": field_id,
                "name": field.get("name", ""),
                "allowedValues": field.get("allowedValues"),
            }

        data = self._load_raw()
        data["entries"][make_key(key)] = fields
        self._save_raw(data)
        logger.debug(f"Cached edit metadata for {make_key(key)} ({len(fields)} fields)")

    def get(self, key: ProjectIssueTypeKey) -> Optional[Dict[str, Dict[str, Any]]]:
        return self._load_raw()["entries"].get(make_key(key))

    def find_field_id_by_name(self, key: ProjectIssueTypeKey, name: str) -> Optional[str]:
        fields = self.get(key)
        if not fields:
            return None
        wanted = name.lower()
        for field_id, field in fields.items():
            if str(field.get("name", "")).lower() == wanted:
                return field_id
        return None

    def get_allowed_values(
        self, key: ProjectIssueTypeKey, field_name_or_id: str
    ) -> Optional[List[Dict[str, Any]]]:
        """
        Allowed values of a cached field, matched by id first, then by name.

        Returns:
            List of allowed values, or None on a cache miss or unknown field
        """
        fields = self.get(key)
        if not fields:
            return None
        if field_name_or_id in fields:
            return fields[field_name_or_id].get("allowedValues")
        wanted = field_name_or_id.lower()
        for field in fields.values():
            if str(field.get("name", "")).lower() == wanted:
                return field.get("allowedValues")
        return None
