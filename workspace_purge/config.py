"""Configuration management for the account purge service."""
from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Dict, Mapping, Optional

import yaml

DEFAULT_DOMAIN = "chatgpt.nyc.mn"
DEFAULT_USERNAME_LENGTH = 8
DEFAULT_TOKEN_ENDPOINT = "https://oauth2.googleapis.com/token"
DEFAULT_DIRECTORY_URL = "https://admin.googleapis.com/admin/directory/v1"


@dataclass(frozen=True)
class Credentials:
    """OAuth2 client credentials used to mint directory access tokens."""

    client_id: str
    client_secret: str
    refresh_token: str

    def __repr__(self) -> str:
        return f"Credentials(client_id={self.client_id!r}, client_secret=***, refresh_token=***)"

    @staticmethod
    def from_dict(data: Mapping[str, object]) -> "Credentials":
        """Create :class:`Credentials` from raw dictionary data."""
        required_fields = ("client_id", "client_secret", "refresh_token")
        missing = [name for name in required_fields if not str(data.get(name) or "").strip()]
        if missing:
            raise ValueError(f"Missing required credential fields: {', '.join(missing)}")

        return Credentials(
            client_id=str(data["client_id"]).strip(),
            client_secret=str(data["client_secret"]).strip(),
            refresh_token=str(data["refresh_token"]).strip(),
        )


@dataclass(frozen=True)
class Settings:
    """Process-wide settings, built once at start-up."""

    credentials: Credentials
    domain: str = DEFAULT_DOMAIN
    username_length: int = DEFAULT_USERNAME_LENGTH
    token_endpoint: str = DEFAULT_TOKEN_ENDPOINT
    directory_base_url: str = DEFAULT_DIRECTORY_URL
    timeout: Optional[float] = None

    def __post_init__(self) -> None:
        if not self.domain.strip():
            raise ValueError("Target domain must not be empty")
        if self.username_length < 1:
            raise ValueError("Username length must be a positive integer")

    def with_overrides(self, **changes: object) -> "Settings":
        return replace(self, **changes)


_ENV_CREDENTIALS = {
    "client_id": "GOOGLE_CLIENT_ID",
    "client_secret": "GOOGLE_CLIENT_SECRET",
    "refresh_token": "GOOGLE_REFRESH_TOKEN",
}


def resolve_config_path(env_value: Optional[str]) -> Path:
    """Resolve the path to the optional YAML configuration file."""
    if env_value:
        candidate = Path(env_value).expanduser().resolve(strict=False)
    else:
        candidate = (Path(__file__).resolve().parent.parent / "config" / "purge.yaml").resolve(strict=False)
    return candidate


def _read_config_file(config_path: Path) -> Dict[str, object]:
    with config_path.open("r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"Configuration file {config_path} must contain a mapping")
    return raw


def _first(*values: object) -> object:
    for value in values:
        if value is not None and value != "":
            return value
    return None


def _parse_int(value: object, name: str) -> int:
    try:
        return int(str(value).strip())
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {value!r}") from exc


def _parse_timeout(value: object) -> Optional[float]:
    if value is None:
        return None
    cleaned = str(value).strip()
    if not cleaned:
        return None
    try:
        return float(cleaned)
    except ValueError as exc:
        raise ValueError(f"HTTP timeout must be a number, got {value!r}") from exc


def load_settings(
    config_path: Optional[Path] = None,
    *,
    environ: Optional[Mapping[str, str]] = None,
) -> Settings:
    """Load settings from the YAML file (when present) and the environment.

    Environment variables take precedence over file values. A config file that
    was named explicitly must exist; the default location is optional.
    """
    env = os.environ if environ is None else environ

    explicit = config_path is not None or bool(env.get("PURGE_CONFIG_PATH"))
    path = config_path or resolve_config_path(env.get("PURGE_CONFIG_PATH"))
    raw: Dict[str, object] = {}
    if path.exists():
        raw = _read_config_file(path)
    elif explicit:
        raise FileNotFoundError(f"Configuration file not found: {path}")

    file_credentials = raw.get("credentials") or {}
    if not isinstance(file_credentials, dict):
        raise ValueError("The 'credentials' key must contain a mapping")
    credential_data: Dict[str, object] = dict(file_credentials)
    for field_name, env_name in _ENV_CREDENTIALS.items():
        if env.get(env_name):
            credential_data[field_name] = env[env_name]

    domain = _first(env.get("PURGE_DOMAIN"), raw.get("domain"), DEFAULT_DOMAIN)
    length_raw = _first(env.get("PURGE_USERNAME_LENGTH"), raw.get("username_length"), DEFAULT_USERNAME_LENGTH)
    token_endpoint = _first(env.get("PURGE_TOKEN_ENDPOINT"), raw.get("token_endpoint"), DEFAULT_TOKEN_ENDPOINT)
    directory_url = _first(env.get("PURGE_DIRECTORY_URL"), raw.get("directory_base_url"), DEFAULT_DIRECTORY_URL)
    timeout_raw = _first(env.get("PURGE_HTTP_TIMEOUT"), raw.get("timeout"))

    return Settings(
        credentials=Credentials.from_dict(credential_data),
        domain=str(domain).strip(),
        username_length=_parse_int(length_raw, "Username length"),
        token_endpoint=str(token_endpoint).strip(),
        directory_base_url=str(directory_url).strip().rstrip("/"),
        timeout=_parse_timeout(timeout_raw),
    )


__all__ = [
    "Credentials",
    "Settings",
    "DEFAULT_DOMAIN",
    "DEFAULT_USERNAME_LENGTH",
    "load_settings",
    "resolve_config_path",
]
