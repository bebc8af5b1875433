from __future__ import annotations

import json
import os
import sys
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Optional

APP_DIR_NAME = "motortown-admin"
CONFIG_FILE_NAME = "api_config.json"
DEFAULT_POLL_RATE_SECONDS = 30
POLL_RATE_KEY = "player_list_poll_rate_seconds"

# Sentinel for "key missing" so an explicit null poll rate stays None.
_MISSING = object()


class ConfigError(ValueError):
    """Configuration is missing, unreadable or invalid."""


@dataclass(frozen=True)
class ApiConfig:
    host: str
    port: int
    password: str
    players_section_enabled: bool = True
    poll_rate_seconds: Optional[int] = DEFAULT_POLL_RATE_SECONDS

    def __post_init__(self) -> None:
        if not isinstance(self.host, str) or not self.host:
            raise ConfigError("host must be a non-empty string")
        if isinstance(self.port, bool) or not isinstance(self.port, int) or not 0 <= self.port <= 65535:
            raise ConfigError(f"port must be an integer between 0 and 65535, got {self.port!r}")
        if not isinstance(self.password, str):
            raise ConfigError("password must be a string")
        if not isinstance(self.players_section_enabled, bool):
            raise ConfigError("players_section_enabled must be a boolean")
        poll = self.poll_rate_seconds
        if poll is not None and (isinstance(poll, bool) or not isinstance(poll, int) or not 0 <= poll <= 2**32 - 1):
            raise ConfigError(f"poll rate must be a non-negative integer, got {poll!r}")

    @property
    def base_url(self) -> str:
        return f"http://{self.host}:{self.port}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "host": self.host,
            "port": self.port,
            "password": self.password,
            "players_section_enabled": self.players_section_enabled,
            POLL_RATE_KEY: self.poll_rate_seconds,
        }

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "ApiConfig":
        if not isinstance(raw, dict):
            raise ConfigError("configuration must be a JSON object")
        missing = [key for key in ("host", "port", "password") if key not in raw]
        if missing:
            raise ConfigError(f"configuration is missing {', '.join(missing)}")
        poll = raw.get(POLL_RATE_KEY, _MISSING)
        return cls(
            host=raw["host"],
            port=raw["port"],
            password=raw["password"],
            players_section_enabled=raw.get("players_section_enabled", True),
            poll_rate_seconds=DEFAULT_POLL_RATE_SECONDS if poll is _MISSING else poll,
        )


def default_config_dir() -> Path:
    override = os.getenv("MOTORTOWN_ADMIN_CONFIG_DIR")
    if override:
        return Path(override)
    if sys.platform == "win32" and os.getenv("APPDATA"):
        return Path(os.environ["APPDATA"]) / APP_DIR_NAME
    xdg = os.getenv("XDG_CONFIG_HOME")
    base = Path(xdg) if xdg else Path.home() / ".config"
    return base / APP_DIR_NAME


class ConfigStore:
    """Reads and writes ``api_config.json`` in the application directory."""

    def __init__(self, directory: Optional[Path] = None):
        self.directory = Path(directory) if directory else default_config_dir()

    @property
    def path(self) -> Path:
        return self.directory / CONFIG_FILE_NAME

    def save(self, config: ApiConfig) -> None:
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            with self.path.open("w", encoding="utf-8") as handle:
                json.dump(config.to_dict(), handle, indent=2)
        except OSError as exc:
            raise ConfigError(f"Failed to write config file {self.path}: {exc}") from exc

    def load(self) -> Optional[ApiConfig]:
        if not self.path.exists():
            return None
        try:
            with self.path.open("r", encoding="utf-8") as handle:
                contents = handle.read()
        except OSError as exc:
            raise ConfigError(f"Failed to read config file {self.path}: {exc}") from exc

        if not contents.strip():
            return None
        try:
            raw = json.loads(contents)
        except ValueError as exc:
            raise ConfigError(f"Failed to parse config JSON: {exc}") from exc
        return ApiConfig.from_dict(raw)


def _env_int(name: str) -> Optional[int]:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    if not value.strip().isdigit():
        raise ConfigError(f"{name} must be a non-negative integer, got {value!r}")
    return int(value)


def load_settings(store: Optional[ConfigStore] = None) -> ApiConfig:
    """Stored configuration with MOTORTOWN_* environment variables layered on top."""
    stored = (store or ConfigStore()).load()

    host = os.getenv("MOTORTOWN_HOST")
    port = _env_int("MOTORTOWN_PORT")
    password = os.getenv("MOTORTOWN_PASSWORD")
    poll_rate = _env_int("MOTORTOWN_POLL_RATE")

    if stored is None:
        if not (host and port is not None and password is not None):
            raise ConfigError("No configuration found; run `motortown-admin configure` or set MOTORTOWN_HOST/PORT/PASSWORD")
        return ApiConfig(
            host=host,
            port=port,
            password=password,
            poll_rate_seconds=DEFAULT_POLL_RATE_SECONDS if poll_rate is None else poll_rate,
        )

    overrides: Dict[str, Any] = {}
    if host:
        overrides["host"] = host
    if port is not None:
        overrides["port"] = port
    if password is not None:
        overrides["password"] = password
    if poll_rate is not None:
        overrides["poll_rate_seconds"] = poll_rate
    return replace(stored, **overrides) if overrides else stored
