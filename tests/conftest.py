"""Shared fixtures for the dialogflow-bridge test suite."""
from __future__ import annotations

import json
from unittest.mock import MagicMock

import pytest

from dialogflow_bridge.config import Config, DetectionProfile, Endpoints, Settings
from dialogflow_bridge.store import CredentialStore


@pytest.fixture
def credentials_file(tmp_path):
    path = tmp_path / "client_secret.json"
    path.write_text(json.dumps({
        "web": {
            "client_id": "test-client-id",
            "client_secret": "test-client-secret",
            "project_id": "test-project",
            "redirect_uris": ["http://localhost:8008/oauth2callback", "http://other/cb"],
        }
    }))
    return path


@pytest.fixture
def fake_settings(tmp_path, credentials_file) -> Settings:
    return Settings(
        credentials_path=str(credentials_file),
        token_path=str(tmp_path / "currentToken.txt"),
        timeout=5.0,
        abort_on_list_failure=True,
    )


@pytest.fixture
def fake_config(fake_settings) -> Config:
    return Config(
        settings=fake_settings,
        endpoints=Endpoints(),
        detection=DetectionProfile(),
    )


@pytest.fixture
def store(fake_settings) -> CredentialStore:
    return CredentialStore(fake_settings.token_path, fake_settings.credentials_path)


@pytest.fixture
def mock_client():
    """MagicMock standing in for DialogflowClient."""
    client = MagicMock()
    client.get = MagicMock()
    client.post = MagicMock()
    client.delete = MagicMock()
    client.close = MagicMock()
    return client
