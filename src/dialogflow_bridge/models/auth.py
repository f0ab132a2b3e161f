"""Auth-related data models."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class ClientCredentials(BaseModel):
    """OAuth client identity for the Dialogflow project. Immutable for the process lifetime."""
    client_id: str
    client_secret: str
    redirect_uri: str
    project_id: str

    model_config = ConfigDict(frozen=True)


class TokenResponse(BaseModel):
    """Response from Google OAuth2 token endpoint."""
    access_token: str
    token_type: str = "Bearer"
    expires_in: int | None = None
    refresh_token: str | None = None
    scope: str | None = None


class TokenState(str, Enum):
    NO_TOKEN = "no_token"
    AWAITING_CODE = "awaiting_code"
    AWAITING_EXCHANGE = "awaiting_exchange"
    TOKEN_READY = "token_ready"


class TokenStatus(BaseModel):
    """Current state of the persisted access token."""
    has_token: bool
    is_valid: bool
    state: TokenState
