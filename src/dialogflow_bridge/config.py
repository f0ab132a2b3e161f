"""Configuration management for the Dialogflow bridge.

Loads runtime settings from .env and endpoint/detection profiles from config/bridge.yaml.
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

import yaml
from pydantic import BaseModel, Field
from dotenv import load_dotenv


class Endpoints(BaseModel):
    """Google OAuth and Dialogflow v2 endpoint URLs."""
    auth_endpoint: str = "https://accounts.google.com/o/oauth2/v2/auth"
    token_endpoint: str = "https://www.googleapis.com/oauth2/v4/token"
    token_info_endpoint: str = "https://www.googleapis.com/oauth2/v1/tokeninfo"
    api_base: str = "https://dialogflow.googleapis.com/v2"
    scope: str = "https://www.googleapis.com/auth/cloud-platform"


class DetectionProfile(BaseModel):
    """Fixed conversation parameters used for detectIntent calls."""
    # Every caller shares this session on the remote side unless one is passed explicitly.
    session_id: str = "b21dffb3-4161-44b4-b136-b3677be342f5"
    project_id: str | None = None  # None = use project_id from the credentials file
    language_code: str = "en"
    time_zone: str = "America/New_York"


class Settings(BaseModel):
    """Application settings loaded from environment variables."""
    credentials_path: str = Field(default="./client_secret.json", description="OAuth client JSON document")
    token_path: str = Field(default="./currentToken.txt", description="Plain-text bearer token file")
    timeout: float = Field(default=30.0, description="Per-call HTTP timeout in seconds")
    abort_on_list_failure: bool = Field(
        default=True,
        description="Stop an intent sync when existing intents cannot be listed",
    )
    host: str = Field(default="127.0.0.1", description="Bind address for `serve`")
    port: int = Field(default=8008, description="Bind port for `serve`")


class Config(BaseModel):
    """Full application configuration."""
    settings: Settings = Field(default_factory=Settings)
    endpoints: Endpoints = Field(default_factory=Endpoints)
    detection: DetectionProfile = Field(default_factory=DetectionProfile)

    def agent_base(self, project_id: str) -> str:
        """Base URL for a project's agent resources."""
        return f"{self.endpoints.api_base.rstrip('/')}/projects/{project_id}"


def _find_project_root() -> Path:
    """Walk up from this file to find the project root (where config/ lives)."""
    current = Path(__file__).resolve().parent
    for parent in [current, *current.parents]:
        if (parent / "config" / "bridge.yaml").exists():
            return parent
    # Fallback: cwd
    return Path.cwd()


def _load_profiles(project_root: Path) -> tuple[Endpoints, DetectionProfile]:
    """Load endpoint and detection profiles from bridge.yaml, defaulting when absent."""
    profiles_path = project_root / "config" / "bridge.yaml"
    if not profiles_path.exists():
        return Endpoints(), DetectionProfile()

    with open(profiles_path) as f:
        data = yaml.safe_load(f) or {}

    return (
        Endpoints(**(data.get("endpoints") or {})),
        DetectionProfile(**(data.get("detection") or {})),
    )


def _env(*keys: str, default: str = "") -> str:
    """Try multiple env var names, return the first one found."""
    for key in keys:
        val = os.environ.get(key, "")
        if val:
            return val.strip().strip('"')
    return default


def _load_settings() -> Settings:
    """Load settings from environment variables."""
    return Settings(
        credentials_path=_env(
            "DIALOGFLOW_BRIDGE_CREDENTIALS_PATH", "GOOGLE_CLIENT_SECRETS", default="./client_secret.json"
        ),
        token_path=_env("DIALOGFLOW_BRIDGE_TOKEN_PATH", default="./currentToken.txt"),
        timeout=float(_env("DIALOGFLOW_BRIDGE_TIMEOUT", default="30")),
        abort_on_list_failure=_env(
            "DIALOGFLOW_BRIDGE_ABORT_ON_LIST_FAILURE", default="true"
        ).lower() in ("true", "1", "yes"),
        host=_env("DIALOGFLOW_BRIDGE_HOST", default="127.0.0.1"),
        port=int(_env("DIALOGFLOW_BRIDGE_PORT", default="8008")),
    )


@lru_cache(maxsize=1)
def get_config() -> Config:
    """Load and cache the full application configuration."""
    project_root = _find_project_root()

    # Load .env from project root if it exists
    env_path = project_root / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    settings = _load_settings()
    endpoints, detection = _load_profiles(project_root)

    return Config(settings=settings, endpoints=endpoints, detection=detection)
