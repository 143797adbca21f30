"""ANSI terminal styling for decoded chat components."""

from __future__ import annotations

from .chat import ChatPayload, render_text

RESET = "\x1b[0m"

_COLORS: dict[str, str] = {
    "black": "\x1b[30m",
    "dark_blue": "\x1b[34m",
    "dark_green": "\x1b[32m",
    "dark_aqua": "\x1b[36m",
    "dark_red": "\x1b[31m",
    "dark_purple": "\x1b[35m",
    "gold": "\x1b[33m",
    "gray": "\x1b[37m",
    "dark_gray": "\x1b[90m",
    "blue": "\x1b[94m",
    "green": "\x1b[92m",
    "aqua": "\x1b[96m",
    "red": "\x1b[91m",
    "light_purple": "\x1b[95m",
    "yellow": "\x1b[93m",
    "white": "\x1b[97m",
}


def style_prefix(payload: ChatPayload) -> str:
    """Escape sequences for the style flags and colour of *payload*."""
    out = []
    if payload.bold:
        out.append("\x1b[1m")
    if payload.italic:
        out.append("\x1b[3m")
    if payload.underlined:
        out.append("\x1b[4m")
    if payload.strikethrough:
        out.append("\x1b[9m")
    if payload.color:
        out.append(_COLORS.get(payload.color, ""))
    return "".join(out)


def format_chat(payload: ChatPayload) -> str:
    """Render *payload* as a styled terminal line, always ending in a reset."""
    return f"{style_prefix(payload)}{render_text(payload)}{RESET}"


def highlight(text: str, color: str) -> str:
    return f"{_COLORS.get(color, '')}{text}{RESET}"
