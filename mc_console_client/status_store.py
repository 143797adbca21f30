"""Server status caching and persistence (status JSON + server icon)."""

from __future__ import annotations

import base64
import binascii
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .chat import ChatPayload, decode_chat, render_text
from .errors import DecodeError

log = logging.getLogger(__name__)

FAVICON_PREFIX = "data:image/png;base64,"


@dataclass
class ServerStatus:
    """Result of a status exchange.

    Attributes
    ----------
    raw_json:
        The status response JSON exactly as received.
    latency_ms:
        Round-trip time of the ping/pong exchange.
    """

    raw_json: str
    latency_ms: float | None = None

    def parsed(self) -> dict[str, Any]:
        """Return the decoded JSON object.

        Raises
        ------
        DecodeError
            If the response is not a JSON object.
        """
        try:
            data = json.loads(self.raw_json)
        except json.JSONDecodeError as exc:
            raise DecodeError(f"Status response is not valid JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise DecodeError("Status response root is not a JSON object")
        return data


def extract_favicon(status: ServerStatus) -> bytes | None:
    """Return the decoded PNG bytes of the ``favicon`` field, if present."""
    favicon = status.parsed().get("favicon")
    if not isinstance(favicon, str) or not favicon.startswith(FAVICON_PREFIX):
        return None
    # Some servers wrap the base64 text at 76 columns.
    encoded = favicon[len(FAVICON_PREFIX):].replace("\n", "")
    try:
        return base64.b64decode(encoded, validate=True)
    except binascii.Error as exc:
        raise DecodeError(f"Favicon is not valid base64: {exc}") from exc


def _motd(description: Any) -> str:
    if isinstance(description, dict):
        return render_text(decode_chat(json.dumps(description)))
    if isinstance(description, str):
        return render_text(ChatPayload(text=description))
    return ""


def summarize(status: ServerStatus) -> str:
    """One-line human summary: version, player counts, MOTD and latency."""
    data = status.parsed()
    version = data.get("version")
    players = data.get("players")
    if not isinstance(version, dict):
        version = {}
    if not isinstance(players, dict):
        players = {}
    parts = [
        f"version={version.get('name', '?')}",
        f"players={players.get('online', '?')}/{players.get('max', '?')}",
    ]
    motd = _motd(data.get("description"))
    if motd:
        parts.append(f"motd={motd!r}")
    if status.latency_ms is not None:
        parts.append(f"ping={status.latency_ms:.0f}ms")
    return " ".join(parts)


class StatusStore:
    """Writes the cached status to disk on demand.

    Parameters
    ----------
    json_file:
        Destination of the raw status JSON.
    icon_file:
        Destination of the decoded favicon PNG.
    """

    def __init__(self, json_file: str | Path, icon_file: str | Path):
        self.json_file = Path(json_file)
        self.icon_file = Path(icon_file)

    def save(self, status: ServerStatus) -> Path | None:
        """Write the JSON file and, if the server sent one, the icon.

        Returns the icon path when an icon was written.
        """
        self.json_file.write_text(status.raw_json, encoding="utf-8")
        log.info(f"Status saved to {self.json_file}")

        icon = extract_favicon(status)
        if icon is None:
            return None
        return self.save_icon(icon)

    def save_icon(self, icon: bytes) -> Path:
        self.icon_file.write_bytes(icon)
        log.info(f"Server icon saved to {self.icon_file} ({len(icon)} bytes)")
        return self.icon_file
