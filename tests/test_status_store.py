from __future__ import annotations

import base64
import json
from pathlib import Path

import pytest

from mc_console_client.errors import DecodeError
from mc_console_client.status_store import ServerStatus, StatusStore, extract_favicon, summarize

PNG = bytes.fromhex("89504e470d0a1a0a0000000d4948445200000001000000010806000000")
FAVICON = "data:image/png;base64," + base64.b64encode(PNG).decode("ascii")


def _status(**fields: object) -> ServerStatus:
    return ServerStatus(raw_json=json.dumps(fields))


def test_extract_favicon_decodes_png() -> None:
    assert extract_favicon(_status(favicon=FAVICON)) == PNG


def test_extract_favicon_accepts_wrapped_base64() -> None:
    encoded = base64.encodebytes(PNG).decode("ascii")
    assert extract_favicon(_status(favicon="data:image/png;base64," + encoded)) == PNG


def test_extract_favicon_absent_or_other_format() -> None:
    assert extract_favicon(_status(description="hi")) is None
    assert extract_favicon(_status(favicon="data:image/jpeg;base64,AAAA")) is None


def test_extract_favicon_bad_base64_is_decode_error() -> None:
    with pytest.raises(DecodeError):
        extract_favicon(_status(favicon="data:image/png;base64,@@@"))


def test_invalid_status_json_is_decode_error() -> None:
    with pytest.raises(DecodeError):
        extract_favicon(ServerStatus(raw_json="not json"))


def test_save_writes_json_and_icon(tmp_path: Path) -> None:
    status = _status(favicon=FAVICON, players={"online": 0, "max": 20})
    store = StatusStore(tmp_path / "status.json", tmp_path / "icon.png")

    assert store.save(status) == tmp_path / "icon.png"
    assert (tmp_path / "icon.png").read_bytes() == PNG
    assert (tmp_path / "status.json").read_text(encoding="utf-8") == status.raw_json


def test_save_without_icon(tmp_path: Path) -> None:
    store = StatusStore(tmp_path / "status.json", tmp_path / "icon.png")
    assert store.save(_status(description="x")) is None
    assert not (tmp_path / "icon.png").exists()


def test_summarize() -> None:
    status = _status(
        version={"name": "1.18.2", "protocol": 758},
        players={"online": 3, "max": 20},
        description={"text": "A Minecraft Server"},
    )
    status.latency_ms = 12.4
    assert summarize(status) == "version=1.18.2 players=3/20 motd='A Minecraft Server' ping=12ms"


def test_summarize_tolerates_missing_fields() -> None:
    assert summarize(_status(description="legacy motd")) == "version=? players=?/? motd='legacy motd'"
