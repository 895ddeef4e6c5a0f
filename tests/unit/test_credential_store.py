"""
Unit tests for the credential store.
"""

import json
import os
import tempfile

import pytest

from jiratui.models.config import CachedCredentials
from jiratui.storage.credential_store import CredentialStore


class TestCredentialStore:
    """Test cached login details."""

    @pytest.fixture
    def temp_storage(self):
        """Create a temporary path that does not exist yet."""
        temp_dir = tempfile.mkdtemp()
        temp_path = os.path.join(temp_dir, "jiratui", "credentials.json")

        yield temp_path

        if os.path.exists(temp_path):
            os.remove(temp_path)

    @pytest.fixture
    def store(self, temp_storage):
        return CredentialStore(storage_path=temp_storage)

    def test_load_missing_file_is_empty(self, store):
        creds = store.load()

        assert creds.base_url is None
        assert creds.username is None

    def test_save_and_load(self, store):
        store.save(CachedCredentials(base_url="https://jira.example.com", username="alice"))

        creds = store.load()
        assert creds.base_url == "https://jira.example.com"
        assert creds.username == "alice"

    def test_file_uses_camel_case_keys(self, store, temp_storage):
        store.save(CachedCredentials(base_url="https://jira.example.com", username="alice"))

        with open(temp_storage) as f:
            data = json.load(f)
        assert data == {"baseUrl": "https://jira.example.com", "username": "alice"}

    def test_corrupt_file_is_empty(self, store, temp_storage):
        os.makedirs(os.path.dirname(temp_storage), exist_ok=True)
        with open(temp_storage, "w") as f:
            f.write("not json")

        assert store.load() == CachedCredentials()

    def test_save_overwrites_previous_login(self, store):
        store.save(CachedCredentials(base_url="https://a.example.com", username="alice"))
        store.save(CachedCredentials(base_url="https://b.example.com", username="bob"))

        assert store.load().username == "bob"
