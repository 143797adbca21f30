"""Chat component decoding.

Only a flat component is understood: style flags, a named colour, and
either literal ``text`` or a ``translate`` key with ``with`` arguments.
Nested ``extra`` arrays are not rendered.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any

from .errors import DecodeError

log = logging.getLogger(__name__)

CHAT_TEXT = "chat.type.text"
WHISPER_INCOMING = "commands.message.display.incoming"
PLAYER_JOINED = "multiplayer.player.joined"
PLAYER_LEFT = "multiplayer.player.left"


@dataclass(frozen=True)
class ChatArgument:
    """One positional substitution argument of a translated component."""

    text: str = ""
    insertion: str | None = None


@dataclass(frozen=True)
class ChatPayload:
    """A decoded chat component."""

    text: str | None = None
    translate: str | None = None
    args: tuple[ChatArgument, ...] = field(default_factory=tuple)
    color: str | None = None
    bold: bool = False
    italic: bool = False
    underlined: bool = False
    strikethrough: bool = False


def _argument(raw: Any) -> ChatArgument:
    if isinstance(raw, str):
        return ChatArgument(text=raw)
    if isinstance(raw, dict):
        text = raw.get("text")
        insertion = raw.get("insertion")
        return ChatArgument(
            text=text if isinstance(text, str) else "",
            insertion=insertion if isinstance(insertion, str) else None,
        )
    return ChatArgument()


def _flag(raw: dict[str, Any], key: str) -> bool:
    return raw.get(key) is True


def _optional_str(raw: dict[str, Any], key: str) -> str | None:
    value = raw.get(key)
    return value if isinstance(value, str) else None


def parse_chat(text: str) -> ChatPayload:
    """Parse the JSON text of a chat field into a :class:`ChatPayload`.

    Raises
    ------
    DecodeError
        If *text* is not JSON, or is JSON of an unusable shape.
    """
    try:
        raw = json.loads(text)
    except (json.JSONDecodeError, TypeError) as exc:
        raise DecodeError(f"Chat component is not valid JSON: {exc}") from exc

    if isinstance(raw, str):
        return ChatPayload(text=raw)
    if not isinstance(raw, dict):
        raise DecodeError(f"Chat component must be an object or string, got {type(raw).__name__}")

    with_ = raw.get("with")
    args = tuple(_argument(a) for a in with_) if isinstance(with_, list) else ()
    return ChatPayload(
        text=_optional_str(raw, "text"),
        translate=_optional_str(raw, "translate"),
        args=args,
        color=_optional_str(raw, "color"),
        bold=_flag(raw, "bold"),
        italic=_flag(raw, "italic"),
        underlined=_flag(raw, "underlined"),
        strikethrough=_flag(raw, "strikethrough"),
    )


def decode_chat(text: str) -> ChatPayload:
    """Like :func:`parse_chat` but never fails: bad input yields an empty payload."""
    try:
        return parse_chat(text)
    except DecodeError as exc:
        log.warning(f"Ignoring undecodable chat component: {exc}")
        return ChatPayload()


def render_text(payload: ChatPayload) -> str:
    """Return the plain display text of *payload* (no styling)."""
    key = payload.translate
    args = payload.args

    if key in (CHAT_TEXT, WHISPER_INCOMING):
        if len(args) != 2:
            return ""
        sender = args[0].insertion or args[0].text
        prefix = f"<{sender}> " if sender else ""
        return prefix + args[1].text

    if key in (PLAYER_JOINED, PLAYER_LEFT):
        if len(args) != 1:
            return ""
        verb = "joined" if key == PLAYER_JOINED else "left"
        return f"{args[0].text} {verb} the game"

    if key is None and payload.text is not None:
        return payload.text

    # Unknown translation key.
    return ""


def describe_reason(text: str) -> str:
    """Return a display string for a disconnect reason component.

    Falls back to the ``translate`` key followed by its string arguments
    when the key has no template here, and to *text* itself when the
    component carries nothing printable.
    """
    payload = decode_chat(text)
    rendered = render_text(payload)
    if rendered:
        return rendered
    if payload.translate:
        words = [arg.text for arg in payload.args if arg.text]
        return " ".join([payload.translate, *words])
    return text
