"""Bridge session — the operations the router and CLI call.

One session owns the credential store, the OAuth flow and the API client.
It is passed explicitly to whatever needs it rather than held globally.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from dialogflow_bridge.auth import OAuthFlow
from dialogflow_bridge.client import DialogflowClient
from dialogflow_bridge.config import Config
from dialogflow_bridge.models.auth import TokenStatus
from dialogflow_bridge.models.intents import IntentInput, ProviderIntent, SyncReport
from dialogflow_bridge.services.detect import QueryRelay
from dialogflow_bridge.services.intents import IntentSyncService, SyncStrategy
from dialogflow_bridge.store import CredentialStore
from dialogflow_bridge.utils.errors import StorageUnavailable


class BridgeSession:
    """Token lifecycle plus intent sync and detection against one Dialogflow project."""

    def __init__(
        self,
        config: Config,
        store: CredentialStore,
        auth: OAuthFlow,
        client: DialogflowClient,
        strategy: SyncStrategy | None = None,
    ) -> None:
        self._config = config
        self._store = store
        self._auth = auth
        self._client = client
        self._strategy = strategy

    @classmethod
    def from_config(cls, config: Config, verbose: bool = False) -> BridgeSession:
        store = CredentialStore(config.settings.token_path, config.settings.credentials_path)
        return cls(
            config,
            store,
            OAuthFlow(config, store),
            DialogflowClient(config, verbose=verbose),
        )

    @property
    def store(self) -> CredentialStore:
        return self._store

    def _intents(self, abort_on_list_failure: bool | None = None) -> IntentSyncService:
        if abort_on_list_failure is None:
            abort_on_list_failure = self._config.settings.abort_on_list_failure
        return IntentSyncService(
            self._client,
            self._store.load_client_credentials().project_id,
            strategy=self._strategy,
            abort_on_list_failure=abort_on_list_failure,
        )

    def _relay(self) -> QueryRelay:
        return QueryRelay(
            self._client,
            self._config.detection,
            self._store.load_client_credentials().project_id,
        )

    # ── Token lifecycle ──────────────────────────────────────────────

    def get_authorization_url(self) -> str:
        return self._auth.build_authorization_url()

    def exchange_code(self, code: str) -> str:
        return self._auth.exchange_code(code)

    def is_token_valid(self, token: str | None = None) -> bool:
        """Probe ``token``, or the persisted token when none is given.

        Returns False without a network call when nothing is persisted.
        """
        if token is None:
            token = self._store.current_token
        if token is None:
            try:
                token = self._store.load_token()
            except StorageUnavailable:
                return False
        return self._auth.validate_token(token)

    def authorized_token(self) -> str:
        """Load and validate the persisted token.

        Raises:
            StorageUnavailable: No token persisted; route the caller to the consent URL.
            ValidationFailure: The token was rejected; same remedy.
        """
        return self._auth.ensure_token()

    def token_status(self) -> TokenStatus:
        return self._auth.get_status()

    # ── Agent operations ─────────────────────────────────────────────

    def list_intents(self) -> list[ProviderIntent]:
        return self._intents().list_intents(self.authorized_token())

    def sync_intents(
        self,
        intent_map: Mapping[str, IntentInput | dict[str, Any]],
        abort_on_list_failure: bool | None = None,
        token: str | None = None,
    ) -> SyncReport:
        """Replace the agent's intents. ``token`` skips the load-and-probe step."""
        token = token or self.authorized_token()
        return self._intents(abort_on_list_failure).replace_intents(intent_map, token)

    def detect(
        self,
        utterance: str,
        session_id: str | None = None,
        token: str | None = None,
    ) -> dict[str, Any]:
        token = token or self.authorized_token()
        return self._relay().detect_intent(utterance, token, session_id=session_id)

    def close(self) -> None:
        self._client.close()
        self._auth.close()
