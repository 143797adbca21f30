"""Client sessions: the short status exchange and the long-lived play session.

Flow of a run:
- A status connection: handshake(next_state=1) → status request →
  status response → ping → pong → close.
- A play connection: handshake(next_state=2) → login start → login
  success → loop { drain queued commands, read one packet, dispatch }.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable
from typing import Any

from .ansi import format_chat, highlight
from .chat import decode_chat, describe_reason, render_text
from .commands import CommandQueue
from .config import AppConfig, ServerConfig
from .connection import Connection, ProtocolState
from .errors import DecodeError, MalformedVarInt, ProtocolMismatch, ServerDisconnect
from .packets import (
    CB_ENCRYPTION_REQUEST,
    CB_LOGIN_DISCONNECT,
    CB_LOGIN_PLUGIN_REQUEST,
    CB_LOGIN_SUCCESS,
    CB_SET_COMPRESSION,
    CB_STATUS_PONG,
    CB_STATUS_RESPONSE,
    MAX_CHAT_LENGTH,
    NEXT_STATE_LOGIN,
    NEXT_STATE_STATUS,
    ChatMessage,
    Disconnect,
    Handshake,
    KeepAlive,
    LoginStart,
    LoginSuccess,
    Ping,
    PlayerInfo,
    build_chat_message,
    build_keep_alive,
    build_pong,
    build_status_ping,
    build_status_request,
    decode_play_packet,
    parse_disconnect_reason,
    parse_status_pong,
    parse_status_response,
)
from .players import PlayerRegistry
from .status_store import ServerStatus, StatusStore, summarize

log = logging.getLogger(__name__)

Output = Callable[[str], None]

HELP_TEXT = (
    "Commands:",
    "list: shows the online players",
    "status: prints the server status and downloads the server icon",
    "help: shows the commands",
    "quit: disconnects from the server",
    "any other commands: sends a chat message to the server with the string",
)

_UNSUPPORTED_LOGIN = {
    CB_ENCRYPTION_REQUEST: "server requires encryption (online mode); use an offline-mode server",
    CB_SET_COMPRESSION: "server enabled compression; set network-compression-threshold=-1",
    CB_LOGIN_PLUGIN_REQUEST: "server sent a login plugin request, which is not supported",
}


# =====================================================================
# Status
# =====================================================================


async def fetch_status(cfg: ServerConfig, ping_payload: int | None = None) -> ServerStatus | None:
    """Run a status exchange on a fresh connection and return the result.

    A status response whose JSON string cannot be decoded is logged and
    not cached; the ping/pong exchange still runs and ``None`` is returned.

    Raises
    ------
    ProtocolMismatch
        If the server answers out of order or the pong does not echo
        *ping_payload*.
    """
    conn = await Connection.open(cfg.host, cfg.port, cfg.connect_timeout_seconds)
    try:
        await conn.send(Handshake(cfg.protocol_version, cfg.host, cfg.port, NEXT_STATE_STATUS).build())
        conn.transition(ProtocolState.STATUS)

        await conn.send(build_status_request())
        packet_id, stream = await conn.receive()
        if packet_id != CB_STATUS_RESPONSE:
            raise ProtocolMismatch(f"Expected status response, got packet 0x{packet_id:02X}")
        try:
            raw_json: str | None = parse_status_response(stream)
        except DecodeError as exc:
            log.warning(f"Ignoring undecodable status response from {conn.peer}: {exc}")
            raw_json = None

        if ping_payload is None:
            ping_payload = int(time.time() * 1000)
        sent_at = time.monotonic()
        await conn.send(build_status_ping(ping_payload))
        packet_id, stream = await conn.receive()
        if packet_id != CB_STATUS_PONG:
            raise ProtocolMismatch(f"Expected pong, got packet 0x{packet_id:02X}")
        echoed = parse_status_pong(stream)
        if echoed != ping_payload:
            raise ProtocolMismatch(f"Pong payload {echoed} does not match ping payload {ping_payload}")
        latency_ms = (time.monotonic() - sent_at) * 1000
    finally:
        await conn.close()

    if raw_json is None:
        return None
    log.info(f"Status from {conn.peer} received ({len(raw_json)} chars, ping {latency_ms:.0f} ms)")
    return ServerStatus(raw_json=raw_json, latency_ms=latency_ms)


# =====================================================================
# Login
# =====================================================================


async def login(conn: Connection, server: ServerConfig, username: str) -> LoginSuccess:
    """Perform the login sequence on *conn* and leave it in the play state."""
    await conn.send(Handshake(server.protocol_version, server.host, server.port, NEXT_STATE_LOGIN).build())
    conn.transition(ProtocolState.LOGIN)
    await conn.send(LoginStart(username).build())

    packet_id, stream = await conn.receive()
    if packet_id == CB_LOGIN_SUCCESS:
        success = LoginSuccess.parse(stream)
        conn.transition(ProtocolState.PLAY)
        return success
    if packet_id == CB_LOGIN_DISCONNECT:
        raise ServerDisconnect(describe_reason(parse_disconnect_reason(stream)))
    if packet_id in _UNSUPPORTED_LOGIN:
        raise ProtocolMismatch(_UNSUPPORTED_LOGIN[packet_id])
    raise ProtocolMismatch(f"Unexpected login packet 0x{packet_id:02X}")


# =====================================================================
# Play
# =====================================================================


class PlaySession:
    """The play-state receive loop and the console commands it serves.

    Parameters
    ----------
    conn:
        A connection already in the play state; owned by this session.
    commands:
        Queue filled by the console reader thread.
    status:
        Status cached by the earlier status exchange, if any.
    status_store:
        Where the ``status`` command writes the JSON and icon.
    output:
        Sink for interactive output lines.
    """

    def __init__(
        self,
        conn: Connection,
        commands: CommandQueue,
        status: ServerStatus | None,
        status_store: StatusStore,
        output: Output = print,
    ):
        self._conn = conn
        self._commands = commands
        self._status = status
        self._store = status_store
        self._output = output
        self.players = PlayerRegistry()
        self.running = False

        self._handlers: dict[type, Callable[[Any], Awaitable[None]]] = {
            KeepAlive: self._on_keep_alive,
            Ping: self._on_ping,
            ChatMessage: self._on_chat,
            PlayerInfo: self._on_player_info,
            Disconnect: self._on_disconnect,
        }

    # ------------------------------------------------------------------
    # Loop
    # ------------------------------------------------------------------

    async def run(self) -> None:
        """Process commands and packets until quit or server disconnect."""
        if self._conn.state != ProtocolState.PLAY:
            raise ProtocolMismatch(f"Play session started in state {self._conn.state.value}")
        self.running = True
        while self.running:
            await self.run_commands()
            if not self.running:
                break
            await self.handle_next_packet()

    async def run_commands(self) -> None:
        """Drain the command queue and act on each line in push order."""
        for line in self._commands.drain():
            await self.handle_command(line)
            if not self.running:
                return

    async def handle_next_packet(self) -> None:
        """Block on one frame and dispatch it by packet ID."""
        packet_id, stream = await self._conn.receive()
        try:
            packet = decode_play_packet(packet_id, stream)
        except (DecodeError, MalformedVarInt) as exc:
            log.warning(f"Dropping malformed packet 0x{packet_id:02X}: {exc}")
            return
        if packet is None:
            return
        await self._handlers[type(packet)](packet)

    # ------------------------------------------------------------------
    # Packet handlers
    # ------------------------------------------------------------------

    async def _on_keep_alive(self, packet: KeepAlive) -> None:
        await self._conn.send(build_keep_alive(packet.payload))

    async def _on_ping(self, packet: Ping) -> None:
        await self._conn.send(build_pong(packet.payload))

    async def _on_chat(self, packet: ChatMessage) -> None:
        payload = decode_chat(packet.json_text)
        if not render_text(payload):
            log.debug(f"Chat message with nothing to display: {packet.json_text[:200]}")
            return
        self._output(format_chat(payload))

    async def _on_player_info(self, packet: PlayerInfo) -> None:
        for player_id, name in packet.added:
            self.players.apply_add(player_id, name)
        for player_id in packet.removed:
            self.players.apply_remove(player_id)

    async def _on_disconnect(self, packet: Disconnect) -> None:
        reason = describe_reason(packet.reason_json)
        self._output(f"Disconnected by server: {reason}" if reason else "Disconnected by server")
        log.info(f"Server closed the session: {packet.reason_json[:200]}")
        self.running = False

    # ------------------------------------------------------------------
    # Console commands
    # ------------------------------------------------------------------

    async def handle_command(self, line: str) -> None:
        if line == "list":
            self._list_players()
        elif line == "help":
            for text in HELP_TEXT:
                self._output(text)
        elif line == "status":
            self._show_status()
        elif line == "quit":
            self._output("Ok, quitting")
            self.running = False
        else:
            await self.send_chat(line)

    async def send_chat(self, message: str) -> None:
        if len(message) > MAX_CHAT_LENGTH:
            self._output(f"Message not sent: longer than {MAX_CHAT_LENGTH} characters")
            return
        await self._conn.send(build_chat_message(message))

    def _list_players(self) -> None:
        names = sorted(self.players.snapshot().values(), key=str.lower)
        self._output(f"Online players ({len(names)}): {', '.join(names)}")

    def _show_status(self) -> None:
        if self._status is None:
            self._output("No server status cached")
            return
        self._output(f"Server status: {self._status.raw_json}")
        try:
            self._output(summarize(self._status))
            icon = self._store.save(self._status)
        except (DecodeError, OSError) as exc:
            log.warning(f"Could not save server status: {exc}")
            self._output(f"Could not save server status: {exc}")
            return
        if icon is not None:
            self._output(highlight("Server icon saved!", "light_purple"))


# =====================================================================
# Entry
# =====================================================================


async def run_client(
    cfg: AppConfig,
    commands: CommandQueue,
    output: Output = print,
    fetch_initial_status: bool = True,
) -> PlaySession:
    """Run the status exchange, then a play session until it ends.

    Returns the finished session so callers can inspect its final state.
    """
    status = await fetch_status(cfg.server) if fetch_initial_status else None

    conn = await Connection.open(cfg.server.host, cfg.server.port, cfg.server.connect_timeout_seconds)
    try:
        success = await login(conn, cfg.server, cfg.player.username)
        output(f"User connected with username: {success.username} and uuid: {success.player_id}")
        session = PlaySession(
            conn,
            commands,
            status,
            StatusStore(cfg.status.json_file, cfg.status.icon_file),
            output=output,
        )
        await session.run()
    finally:
        await conn.close()
    return session
