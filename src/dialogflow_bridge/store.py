"""Durable storage for the bearer token and the OAuth client document.

The token file holds a single plain-text value. Reads and writes are not
locked: two concurrent exchanges race and the last writer wins.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from dialogflow_bridge.models.auth import ClientCredentials
from dialogflow_bridge.utils.errors import StorageUnavailable

logger = logging.getLogger(__name__)


class CredentialStore:
    """Owns the one active access token plus the static client credentials."""

    def __init__(self, token_path: str | Path, credentials_path: str | Path) -> None:
        self._token_path = Path(token_path)
        self._credentials_path = Path(credentials_path)
        self._token: str | None = None
        self._credentials: ClientCredentials | None = None

    @property
    def token_path(self) -> Path:
        return self._token_path

    @property
    def current_token(self) -> str | None:
        """The most recently loaded or saved token, without touching disk."""
        return self._token

    def load_token(self) -> str:
        """Read the persisted token.

        Raises:
            StorageUnavailable: If the file is absent, unreadable or empty.
        """
        try:
            token = self._token_path.read_text(encoding="utf-8").strip()
        except OSError as e:
            raise StorageUnavailable(f"Token file unavailable at {self._token_path}: {e}") from e

        if not token:
            raise StorageUnavailable(f"Token file at {self._token_path} is empty")

        self._token = token
        return token

    def save_token(self, token: str) -> None:
        """Persist a token, overwriting any previous value.

        Raises:
            StorageUnavailable: If the token file cannot be written.
        """
        try:
            self._token_path.parent.mkdir(parents=True, exist_ok=True)
            self._token_path.write_text(token, encoding="utf-8")
        except OSError as e:
            raise StorageUnavailable(f"Cannot write token file at {self._token_path}: {e}") from e
        self._token = token
        logger.info("Saved access token to %s", self._token_path)

    def load_client_credentials(self) -> ClientCredentials:
        """Load (once) the ``web`` section of a Google OAuth client JSON document.

        Raises:
            StorageUnavailable: If the document is missing, unreadable or lacks a field.
        """
        if self._credentials is not None:
            return self._credentials

        path = self._credentials_path
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StorageUnavailable(f"Client credentials unavailable at {path}: {e}") from e

        try:
            web = data["web"]
            self._credentials = ClientCredentials(
                client_id=web["client_id"],
                client_secret=web["client_secret"],
                redirect_uri=web["redirect_uris"][0],
                project_id=web["project_id"],
            )
        except (KeyError, IndexError, TypeError, ValidationError) as e:
            raise StorageUnavailable(f"Malformed client credentials in {path}: missing {e}") from e

        return self._credentials
