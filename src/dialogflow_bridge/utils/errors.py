"""Error taxonomy and structured error handling for agent-friendly output."""

from __future__ import annotations

import json
import sys
from typing import TYPE_CHECKING, Any

from rich.console import Console

if TYPE_CHECKING:
    from dialogflow_bridge.models.intents import SyncReport

console = Console(stderr=True)


class BridgeError(RuntimeError):
    """Base class for all bridge failures."""


class TransportError(BridgeError):
    """Network, DNS, TLS or timeout failure before a response was received."""


class ProviderError(BridgeError):
    """The provider answered with a non-2xx status."""

    def __init__(self, message: str, status_code: int | None = None, detail: Any = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail


class StorageUnavailable(BridgeError):
    """Token or client-credentials file is missing, unreadable or malformed."""


class ValidationFailure(BridgeError):
    """The persisted token did not pass the provider's token-info probe."""


class SyncAbortedError(BridgeError):
    """Intent listing failed, so the sync stopped before touching the agent."""

    def __init__(self, message: str, report: SyncReport) -> None:
        super().__init__(message)
        self.report = report


# Actionable hints keyed by error substring
_ERROR_HINTS: list[tuple[str, str]] = [
    ("401", "Token may be expired — run `dialogflow-bridge auth url` and log in again"),
    ("unauthenticated", "Token may be expired — run `dialogflow-bridge auth url` and log in again"),
    ("token", "Token may be missing or expired — run `dialogflow-bridge auth url` and log in again"),
    ("client_secret", "Download the OAuth client JSON and point DIALOGFLOW_BRIDGE_CREDENTIALS_PATH at it"),
    ("credentials", "Download the OAuth client JSON and point DIALOGFLOW_BRIDGE_CREDENTIALS_PATH at it"),
    ("403", "The token lacks access to this project — check the cloud-platform scope and project_id"),
    ("429", "Quota exceeded — wait a moment and retry"),
    ("timeout", "Request timed out — try again or check network connectivity"),
    ("timed out", "Request timed out — try again or check network connectivity"),
    ("connection", "Connection error — check network connectivity"),
    ("NOT_FOUND", "The agent or intent does not exist — verify project_id in the credentials file"),
    ("INVALID_ARGUMENT", "Invalid argument — check the intent payload structure"),
]


def _get_hint(error_message: str) -> str | None:
    """Match an error message to an actionable hint."""
    lower = error_message.lower()
    for pattern, hint in _ERROR_HINTS:
        if pattern.lower() in lower:
            return hint
    return None


def _get_code(error: Exception) -> str:
    """Classify an error into a stable code."""
    message = str(error)
    lower = message.lower()

    if isinstance(error, ValidationFailure) or "401" in message or "unauthenticated" in lower:
        return "AUTH_ERROR"
    if isinstance(error, StorageUnavailable):
        return "STORAGE_UNAVAILABLE"
    if isinstance(error, SyncAbortedError):
        return "SYNC_ABORTED"
    if "timeout" in lower or "timed out" in lower:
        return "TIMEOUT"
    if isinstance(error, TransportError) or "connection" in lower:
        return "CONNECTION_ERROR"
    if isinstance(error, ProviderError):
        return "PROVIDER_ERROR"
    return "RUNTIME_ERROR"


def handle_error(error: Exception) -> None:
    """Handle an error with structured output to stdout and human-readable output to stderr.

    Outputs a JSON error object to stdout for agent consumption:
    {"error": true, "code": "PROVIDER_ERROR", "message": "...", "hint": "..."}

    Also prints a human-readable error to stderr.
    """
    message = str(error)
    hint = _get_hint(message)

    error_obj: dict[str, object] = {
        "error": True,
        "code": _get_code(error),
        "message": message,
    }
    if hint:
        error_obj["hint"] = hint
    if isinstance(error, ProviderError) and error.detail is not None:
        error_obj["detail"] = error.detail

    json.dump(error_obj, sys.stdout, default=str)
    sys.stdout.write("\n")

    console.print(f"[red]Error:[/red] {message}")
    if hint:
        console.print(f"[dim]Hint: {hint}[/dim]")
