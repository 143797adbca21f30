"""YAML configuration loader and validation for the console client."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .packets import PROTOCOL_VERSION

# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass
class ServerConfig:
    """Where to connect."""

    host: str = "127.0.0.1"
    port: int = 25565
    protocol_version: int = PROTOCOL_VERSION
    connect_timeout_seconds: float = 10.0


@dataclass
class PlayerConfig:
    """Offline-mode identity sent in Login Start."""

    username: str = "eudinaltapartee"


@dataclass
class StatusConfig:
    """Files written by the ``status`` command."""

    json_file: str = "status_response.json"
    icon_file: str = "server-icon.png"


@dataclass
class LoggingConfig:
    """Logging destination and rotation settings."""

    level: str = "INFO"
    file: str = ""  # empty = stderr only
    max_bytes: int = 10_485_760  # 10 MB
    backup_count: int = 5


@dataclass
class AppConfig:
    """Top-level application configuration."""

    server: ServerConfig = field(default_factory=ServerConfig)
    player: PlayerConfig = field(default_factory=PlayerConfig)
    status: StatusConfig = field(default_factory=StatusConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class ConfigError(Exception):
    """Raised when the configuration is invalid or incomplete."""


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------


def _get(data: dict[str, Any], key: str, expected_type: type, default: Any = None) -> Any:
    """Retrieve *key* from *data*, coerce to *expected_type*, fallback to *default*."""
    value = data.get(key, default)
    if value is None:
        return default
    try:
        return expected_type(value)
    except (ValueError, TypeError) as exc:
        raise ConfigError(
            f"Config key '{key}': cannot convert {value!r} to {expected_type.__name__}"
        ) from exc


def _section(raw: dict[str, Any], name: str) -> dict[str, Any]:
    section = raw.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigError(f"Config section '{name}' must be a YAML mapping.")
    return section


def _load_server(raw: dict[str, Any]) -> ServerConfig:
    return ServerConfig(
        host=_get(raw, "host", str, ServerConfig.host),
        port=_get(raw, "port", int, ServerConfig.port),
        protocol_version=_get(raw, "protocol_version", int, ServerConfig.protocol_version),
        connect_timeout_seconds=_get(
            raw, "connect_timeout_seconds", float, ServerConfig.connect_timeout_seconds
        ),
    )


def _load_player(raw: dict[str, Any]) -> PlayerConfig:
    return PlayerConfig(username=_get(raw, "username", str, PlayerConfig.username))


def _load_status(raw: dict[str, Any]) -> StatusConfig:
    return StatusConfig(
        json_file=_get(raw, "json_file", str, StatusConfig.json_file),
        icon_file=_get(raw, "icon_file", str, StatusConfig.icon_file),
    )


def _load_logging(raw: dict[str, Any]) -> LoggingConfig:
    return LoggingConfig(
        level=_get(raw, "level", str, LoggingConfig.level),
        file=_get(raw, "file", str, LoggingConfig.file),
        max_bytes=_get(raw, "max_bytes", int, LoggingConfig.max_bytes),
        backup_count=_get(raw, "backup_count", int, LoggingConfig.backup_count),
    )


def validate(config: AppConfig) -> AppConfig:
    """Check cross-field constraints; returns *config* unchanged.

    Raises
    ------
    ConfigError
        If the port or username is out of range.
    """
    if not config.server.host:
        raise ConfigError("server.host must not be empty.")
    if not 1 <= config.server.port <= 65535:
        raise ConfigError(f"server.port must be between 1 and 65535, got {config.server.port}.")
    if config.server.connect_timeout_seconds <= 0:
        raise ConfigError("server.connect_timeout_seconds must be positive.")
    if not 1 <= len(config.player.username) <= 16:
        raise ConfigError(
            f"player.username must be 1 to 16 characters, got {config.player.username!r}."
        )
    return config


def load_config(path: str | Path | None = None) -> AppConfig:
    """Load and validate configuration from a YAML file.

    Parameters
    ----------
    path:
        Filesystem path to the YAML config file, or None for the defaults.

    Returns
    -------
    AppConfig
        Fully-validated configuration object.

    Raises
    ------
    ConfigError
        If the file is missing, unparseable, or semantically invalid.
    """
    if path is None:
        return validate(AppConfig())

    path = Path(path)
    if not path.is_file():
        raise ConfigError(f"Configuration file not found: {path}")

    try:
        with path.open("r", encoding="utf-8") as fh:
            raw: dict[str, Any] = yaml.safe_load(fh) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse YAML config: {exc}") from exc

    if not isinstance(raw, dict):
        raise ConfigError("Config root must be a YAML mapping (dict).")

    config = AppConfig(
        server=_load_server(_section(raw, "server")),
        player=_load_player(_section(raw, "player")),
        status=_load_status(_section(raw, "status")),
        logging=_load_logging(_section(raw, "logging")),
    )
    return validate(config)
