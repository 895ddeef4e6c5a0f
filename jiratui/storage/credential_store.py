"""
Storage for remembered login details.

Keeps the last used base URL and username so the login prompt can be
prefilled. The secret is never written.
"""

import json
from pathlib import Path
from typing import Optional, Union

from loguru import logger
from pydantic import ValidationError

from jiratui.config.settings import settings
from jiratui.models.config import CachedCredentials


class CredentialStore:
    """JSON file holding {"baseUrl": ..., "username": ...}."""

    def __init__(self, storage_path: Optional[Union[str, Path]] = None):
        """
        Initialize the credential store.

        Args:
            storage_path: Path to JSON storage file. Defaults to <config_dir>/credentials.json
        """
        if storage_path is None:
            storage_path = Path(settings.config_dir) / "credentials.json"
        self.storage_path = Path(storage_path)

    def load(self) -> CachedCredentials:
        """
        Load cached credentials.

        Returns:
            CachedCredentials, empty if the file is missing or unreadable
        """
        if not self.storage_path.exists():
            return CachedCredentials()
        try:
            data = json.loads(self.storage_path.read_text(encoding="utf-8"))
            return CachedCredentials.model_validate(data)
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            logger.warning(f"Failed to load cached credentials: {e}. Returning empty.")
            return CachedCredentials()

    def save(self, credentials: CachedCredentials) -> None:
        """
        Save base URL and username.

        Args:
            credentials: Details to remember
        """
        try:
            self.storage_path.parent.mkdir(parents=True, exist_ok=True)
            payload = credentials.model_dump(by_alias=True, exclude_none=True)
            self.storage_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
            logger.info(f"Saved credentials cache to {self.storage_path}")
        except OSError as e:
            logger.error(f"Failed to save credentials cache: {e}")
