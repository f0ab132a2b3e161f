"""Base API client for the Dialogflow v2 REST API.

Handles bearer header injection, timeouts and error mapping. Calls are made
once: there is no retry or backoff.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from dialogflow_bridge.config import Config
from dialogflow_bridge.utils.errors import ProviderError, TransportError

logger = logging.getLogger(__name__)


def decode_json(response: httpx.Response) -> Any:
    """Parse a 2xx body; a body that is not JSON is reported as a provider fault."""
    try:
        return response.json()
    except ValueError as e:
        raise ProviderError(
            f"API returned a non-JSON body (HTTP {response.status_code}): {e}",
            status_code=response.status_code,
            detail=response.text,
        ) from e


class DialogflowClient:
    """HTTP client for Dialogflow with bearer auth and provider error mapping."""

    def __init__(self, config: Config, verbose: bool = False) -> None:
        self._config = config
        self._verbose = verbose
        self._http = httpx.Client(timeout=config.settings.timeout)

    def url_for(self, path: str) -> str:
        """Resolve a resource path (e.g. ``projects/p/agent``) against the API base."""
        return f"{self._config.endpoints.api_base.rstrip('/')}/{path.lstrip('/')}"

    def request(
        self,
        method: str,
        path: str,
        token: str,
        *,
        body: dict[str, Any] | None = None,
        params: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Make an authenticated API request.

        Args:
            method: HTTP method (GET, POST, DELETE).
            path: Resource path relative to the API base, e.g. "projects/p/agent/intents".
            token: Bearer access token.
            body: JSON request body.
            params: Query parameters.

        Returns:
            The httpx.Response object (always 2xx).

        Raises:
            TransportError: On network, DNS, TLS or timeout failure.
            ProviderError: On any non-2xx response.
        """
        url = self.url_for(path)
        headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }

        if self._verbose:
            logger.info(f"{method} {url}")
            if body:
                logger.info(f"Body: {body}")

        try:
            response = self._http.request(
                method=method,
                url=url,
                headers=headers,
                json=body,
                params=params,
            )
        except httpx.TimeoutException as e:
            raise TransportError(f"Request to {url} timed out: {e}") from e
        except httpx.HTTPError as e:
            raise TransportError(f"Connection error for {method} {url}: {e}") from e

        if self._verbose:
            logger.info(f"Response: {response.status_code}")

        if response.status_code >= 400:
            detail: Any = response.text
            message = response.text
            try:
                detail = response.json()
                message = detail.get("error", {}).get("message", response.text)
            except (ValueError, AttributeError):
                pass
            raise ProviderError(
                f"API error (HTTP {response.status_code}): {message}",
                status_code=response.status_code,
                detail=detail,
            )

        return response

    def get(self, path: str, token: str, **kwargs: Any) -> httpx.Response:
        """Convenience method for GET requests."""
        return self.request("GET", path, token, **kwargs)

    def post(self, path: str, token: str, **kwargs: Any) -> httpx.Response:
        """Convenience method for POST requests."""
        return self.request("POST", path, token, **kwargs)

    def delete(self, path: str, token: str, **kwargs: Any) -> httpx.Response:
        """Convenience method for DELETE requests."""
        return self.request("DELETE", path, token, **kwargs)

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._http.close()
