"""
Cache-aware access to issue edit metadata.
"""

from typing import Any, Dict, List, Optional

from loguru import logger

from jiratui.cache.fields_cache import ProjectIssueTypeKey
from jiratui.core.protocols import IFieldsCache, IJiraClient


def normalize_edit_meta(editmeta: Dict[str, Any]) -> Dict[str, Dict[str, Any]]:
    """Reduce an editmeta document to {field_id: {id, name, allowedValues}}."""
    return {
        field_id: {
            "id": field_id,
            "name": field.get("name", ""),
            "allowedValues": field.get("allowedValues"),
        }
        for field_id, field in (editmeta.get("fields") or {}).items()
    }


class EditMetaService:
    """
    Serves edit metadata from the fields cache, fetching live on a miss.

    Without a cache every lookup is a live fetch.
    """

    def __init__(self, client: IJiraClient, cache: Optional[IFieldsCache] = None):
        self.client = client
        self.cache = cache

    def _key(self, project_key: str, issue_type: str) -> ProjectIssueTypeKey:
        return ProjectIssueTypeKey(
            base_url=self.client.config.base_url,
            mode=self.client.config.mode,
            project_key=project_key,
            issue_type=issue_type,
        )

    async def get_edit_meta(
        self, issue_key: str, project_key: str, issue_type: str
    ) -> Dict[str, Dict[str, Any]]:
        """
        Editable fields of an issue's project/issue-type combination.

        Args:
            issue_key: Issue used for the live fetch on a miss
            project_key: Project of the issue
            issue_type: Issue type name of the issue

        Returns:
            Mapping of field id to {id, name, allowedValues}
        """
        key = self._key(project_key, issue_type)
        if self.cache is not None:
            cached = self.cache.get(key)
            if cached is not None:
                logger.debug(f"Edit metadata cache hit for {project_key}/{issue_type}")
                return cached

        logger.info(f"Fetching edit metadata for {issue_key} ({project_key}/{issue_type})")
        editmeta = await self.client.get_issue_edit_meta(issue_key)
        if self.cache is None:
            return normalize_edit_meta(editmeta)

        self.cache.put(key, editmeta)
        return self.cache.get(key) or normalize_edit_meta(editmeta)

    async def find_field_id(
        self, issue_key: str, project_key: str, issue_type: str, field_name: str
    ) -> Optional[str]:
        fields = await self.get_edit_meta(issue_key, project_key, issue_type)
        wanted = field_name.lower()
        for field_id, field in fields.items():
            if str(field.get("name", "")).lower() == wanted:
                return field_id
        return None

    async def get_allowed_values(
        self, issue_key: str, project_key: str, issue_type: str, field_name_or_id: str
    ) -> Optional[List[Dict[str, Any]]]:
        fields = await self.get_edit_meta(issue_key, project_key, issue_type)
        if field_name_or_id in fields:
            return fields[field_name_or_id].get("allowedValues")
        field_id = await self.find_field_id(issue_key, project_key, issue_type, field_name_or_id)
        return fields[field_id].get("allowedValues") if field_id else None
