"""OAuth2 authorization-code flow for the Dialogflow API.

Builds the consent URL, exchanges codes for tokens, and probes token liveness.
Tokens carry no tracked expiry: validity is checked on demand against the
token-info endpoint and there is no automatic refresh.
"""

from __future__ import annotations

import logging
from urllib.parse import urlencode

import httpx

from dialogflow_bridge.config import Config
from dialogflow_bridge.models.auth import ClientCredentials, TokenResponse, TokenState, TokenStatus
from dialogflow_bridge.store import CredentialStore
from dialogflow_bridge.utils.errors import (
    ProviderError,
    StorageUnavailable,
    TransportError,
    ValidationFailure,
)

logger = logging.getLogger(__name__)


class OAuthFlow:
    """Drives NO_TOKEN → AWAITING_CODE → AWAITING_EXCHANGE → TOKEN_READY."""

    def __init__(self, config: Config, store: CredentialStore) -> None:
        self._config = config
        self._store = store
        self._state = TokenState.NO_TOKEN
        self._http = httpx.Client(timeout=config.settings.timeout)

    @property
    def state(self) -> TokenState:
        return self._state

    @property
    def credentials(self) -> ClientCredentials:
        return self._store.load_client_credentials()

    def build_authorization_url(self) -> str:
        """Build the browser-facing consent URL that returns an authorization code."""
        creds = self.credentials
        params = urlencode({
            "scope": self._config.endpoints.scope,
            "client_id": creds.client_id,
            "redirect_uri": creds.redirect_uri,
            "response_type": "code",
        })
        self._state = TokenState.AWAITING_CODE
        return f"{self._config.endpoints.auth_endpoint}?{params}"

    def exchange_code(self, code: str) -> str:
        """Exchange an authorization code for an access token and persist it.

        Args:
            code: The ``code`` query parameter Google sent to the redirect URI.

        Returns:
            The new access token.

        Raises:
            TransportError: If the token endpoint could not be reached.
            ProviderError: If Google rejected the exchange or returned no token.
            StorageUnavailable: If the new token could not be written.
        """
        creds = self.credentials
        self._state = TokenState.AWAITING_EXCHANGE

        try:
            response = self._http.post(
                self._config.endpoints.token_endpoint,
                data={
                    "client_id": creds.client_id,
                    "client_secret": creds.client_secret,
                    "grant_type": "authorization_code",
                    "redirect_uri": creds.redirect_uri,
                    "code": code,
                },
            )
        except httpx.HTTPError as e:
            self._state = TokenState.NO_TOKEN
            raise TransportError(f"Token exchange failed: {e}") from e

        if not 200 <= response.status_code < 300:
            self._state = TokenState.NO_TOKEN
            error_detail = response.text
            try:
                error_json = response.json()
                error_detail = error_json.get("error_description", error_json.get("error", response.text))
            except (ValueError, AttributeError):
                pass
            raise ProviderError(
                f"Token exchange failed (HTTP {response.status_code}): {error_detail}",
                status_code=response.status_code,
                detail=error_detail,
            )

        try:
            token_data = TokenResponse(**response.json())
        except (ValueError, TypeError) as e:
            self._state = TokenState.NO_TOKEN
            raise ProviderError(
                f"Token exchange returned no access_token: {e}",
                status_code=response.status_code,
            ) from e

        try:
            self._store.save_token(token_data.access_token)
        except StorageUnavailable:
            self._state = TokenState.NO_TOKEN
            raise
        self._state = TokenState.TOKEN_READY
        return token_data.access_token

    def validate_token(self, token: str | None) -> bool:
        """Probe the token-info endpoint. Any 2xx means valid; the body is not inspected."""
        if not token:
            return False

        try:
            response = self._http.get(
                self._config.endpoints.token_info_endpoint,
                params={"access_token": token},
            )
        except httpx.HTTPError as e:
            logger.warning("Token probe failed: %s", e)
            self._state = TokenState.NO_TOKEN
            return False

        if not 200 <= response.status_code < 300:
            logger.warning("Token probe rejected (HTTP %s)", response.status_code)
            self._state = TokenState.NO_TOKEN
            return False

        logger.debug("Token probe succeeded")
        self._state = TokenState.TOKEN_READY
        return True

    def load_persisted_token(self) -> str:
        """Read the persisted token; raises StorageUnavailable if there is none."""
        return self._store.load_token()

    def ensure_token(self) -> str:
        """Return the persisted token if the provider still accepts it.

        Raises:
            StorageUnavailable: No token has been persisted yet.
            ValidationFailure: The persisted token failed the probe.
        """
        try:
            token = self.load_persisted_token()
        except StorageUnavailable:
            self._state = TokenState.NO_TOKEN
            raise

        if not self.validate_token(token):
            raise ValidationFailure("Persisted access token is no longer valid")
        return token

    def get_status(self) -> TokenStatus:
        """Load and probe the persisted token, without raising."""
        try:
            token = self.load_persisted_token()
        except StorageUnavailable:
            self._state = TokenState.NO_TOKEN
            return TokenStatus(has_token=False, is_valid=False, state=self._state)

        is_valid = self.validate_token(token)
        return TokenStatus(has_token=True, is_valid=is_valid, state=self._state)

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._http.close()
