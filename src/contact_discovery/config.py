"""Settings from the environment (and a .env file at the repo root or cwd)."""

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_REGION = "us-central1"
DEFAULT_PLATFORM = "android"
DEFAULT_MATCH_TIMEOUT = 30.0
DEFAULT_INVITE_TIMEOUT = 20.0

ENV_FUNCTIONS_URL = "CONTACT_DISCOVERY_FUNCTIONS_URL"
ENV_PROJECT_ID = "FIREBASE_PROJECT_ID"
ENV_REGION = "CONTACT_DISCOVERY_FUNCTIONS_REGION"
ENV_ID_TOKEN = "CONTACT_DISCOVERY_ID_TOKEN"
ENV_PLATFORM = "CONTACT_DISCOVERY_PLATFORM"
ENV_PHONE_REGION = "CONTACT_DISCOVERY_PHONE_REGION"
ENV_MATCH_TIMEOUT = "CONTACT_DISCOVERY_MATCH_TIMEOUT"
ENV_INVITE_TIMEOUT = "CONTACT_DISCOVERY_INVITE_TIMEOUT"
ENV_LOG_LEVEL = "CONTACT_DISCOVERY_LOG_LEVEL"


def _repo_root() -> Path:
    """Return repo root (parent of src)."""
    return Path(__file__).resolve().parent.parent.parent


def load_env_file() -> None:
    """Load .env from repo root or the current directory, first one found."""
    for path in (_repo_root() / ".env", Path.cwd() / ".env"):
        if path.exists():
            load_dotenv(path)
            break


def _get(environ: Mapping[str, str], key: str) -> str | None:
    return (environ.get(key) or "").strip() or None


def _seconds(environ: Mapping[str, str], key: str, default: float) -> float:
    value = _get(environ, key)
    if value is None:
        return default
    try:
        seconds = float(value)
    except ValueError:
        raise ValueError(f"{key} must be a number of seconds, got {value!r}") from None
    if seconds <= 0:
        raise ValueError(f"{key} must be positive")
    return seconds


@dataclass(frozen=True)
class Settings:
    functions_url: str | None = None
    project_id: str | None = None
    region: str = DEFAULT_REGION
    id_token: str | None = None
    platform: str = DEFAULT_PLATFORM
    phone_region: str | None = None
    match_timeout: float = DEFAULT_MATCH_TIMEOUT
    invite_timeout: float = DEFAULT_INVITE_TIMEOUT
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        env = os.environ if environ is None else environ
        return cls(
            functions_url=_get(env, ENV_FUNCTIONS_URL),
            project_id=_get(env, ENV_PROJECT_ID),
            region=_get(env, ENV_REGION) or DEFAULT_REGION,
            id_token=_get(env, ENV_ID_TOKEN),
            platform=(_get(env, ENV_PLATFORM) or DEFAULT_PLATFORM).lower(),
            phone_region=(_get(env, ENV_PHONE_REGION) or "").upper() or None,
            match_timeout=_seconds(env, ENV_MATCH_TIMEOUT, DEFAULT_MATCH_TIMEOUT),
            invite_timeout=_seconds(env, ENV_INVITE_TIMEOUT, DEFAULT_INVITE_TIMEOUT),
            log_level=(_get(env, ENV_LOG_LEVEL) or "INFO").upper(),
        )

    def functions_base_url(self) -> str:
        """Explicit URL if set, else https://<region>-<project>.cloudfunctions.net."""
        if self.functions_url:
            return self.functions_url.rstrip("/")
        if not self.project_id:
            raise ValueError(f"Set {ENV_FUNCTIONS_URL} or {ENV_PROJECT_ID}")
        return f"https://{self.region}-{self.project_id}.cloudfunctions.net"
