"""Packet catalog for protocol 758 (Minecraft 1.18.2).

Serverbound packets are produced by ``build_*`` helpers returning a
complete frame.  Clientbound packets are dataclasses with a ``parse``
classmethod reading from a body cursor positioned after the packet ID.
"""

from __future__ import annotations

import io
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Union

from .errors import DecodeError
from .mc_protocol import (
    build_packet,
    read_bool,
    read_long,
    read_unsigned_byte,
    read_unsigned_short,
    read_utf,
    read_uuid,
    read_varint,
    skip_utf,
    write_long,
    write_unsigned_short,
    write_utf,
    write_varint,
)

PROTOCOL_VERSION = 758

NEXT_STATE_STATUS = 1
NEXT_STATE_LOGIN = 2

# Handshake, serverbound
SB_HANDSHAKE = 0x00

# Status
SB_STATUS_REQUEST = 0x00
SB_STATUS_PING = 0x01
CB_STATUS_RESPONSE = 0x00
CB_STATUS_PONG = 0x01

# Login
SB_LOGIN_START = 0x00
CB_LOGIN_DISCONNECT = 0x00
CB_ENCRYPTION_REQUEST = 0x01
CB_LOGIN_SUCCESS = 0x02
CB_SET_COMPRESSION = 0x03
CB_LOGIN_PLUGIN_REQUEST = 0x04

# Play, serverbound
SB_CHAT_MESSAGE = 0x03
SB_KEEP_ALIVE = 0x0F
SB_PONG = 0x1D

# Play, clientbound
CB_CHAT_MESSAGE = 0x0F
CB_DISCONNECT = 0x1A
CB_KEEP_ALIVE = 0x21
CB_PING = 0x30
CB_PLAYER_INFO = 0x36

MAX_CHAT_LENGTH = 256

PLAYER_INFO_ADD = 0
PLAYER_INFO_GAME_MODE = 1
PLAYER_INFO_LATENCY = 2
PLAYER_INFO_DISPLAY_NAME = 3
PLAYER_INFO_REMOVE = 4


# =====================================================================
# Handshake / login (serverbound)
# =====================================================================


@dataclass
class Handshake:
    """Client → Server handshake (packet 0x00 in the handshake state)."""

    protocol_version: int
    server_address: str
    server_port: int
    next_state: int  # 1 = Status, 2 = Login

    @classmethod
    def parse(cls, stream: io.BytesIO) -> Handshake:
        """Read a handshake body back; the client never receives one, so
        this serves local test servers and wire round trips."""
        protocol_version = read_varint(stream)
        server_address = read_utf(stream)
        server_port = read_unsigned_short(stream)
        next_state = read_varint(stream)
        return cls(protocol_version, server_address, server_port, next_state)

    def build(self) -> bytes:
        payload = (
            write_varint(self.protocol_version)
            + write_utf(self.server_address)
            + write_unsigned_short(self.server_port)
            + write_varint(self.next_state)
        )
        return build_packet(SB_HANDSHAKE, payload)


@dataclass
class LoginStart:
    """Client → Server login start (packet 0x00 in the login state)."""

    player_name: str

    @classmethod
    def parse(cls, stream: io.BytesIO) -> LoginStart:
        """Inverse of :meth:`build`, for local test servers."""
        return cls(read_utf(stream))

    def build(self) -> bytes:
        return build_packet(SB_LOGIN_START, write_utf(self.player_name))


# =====================================================================
# Status
# =====================================================================


def build_status_request() -> bytes:
    return build_packet(SB_STATUS_REQUEST)


def build_status_ping(payload: int) -> bytes:
    """Build a Ping packet (0x01 in the status state) carrying a long."""
    return build_packet(SB_STATUS_PING, write_long(payload))


def parse_status_response(stream: io.BytesIO) -> str:
    """Return the raw JSON text of a Status Response packet."""
    return read_utf(stream)


def parse_status_pong(stream: io.BytesIO) -> int:
    return read_long(stream)


# =====================================================================
# Login (clientbound)
# =====================================================================


@dataclass
class LoginSuccess:
    """Server → Client login success (packet 0x02 in the login state)."""

    player_id: uuid.UUID
    username: str

    @classmethod
    def parse(cls, stream: io.BytesIO) -> LoginSuccess:
        player_id = read_uuid(stream)
        username = read_utf(stream)
        return cls(player_id, username)


def parse_disconnect_reason(stream: io.BytesIO) -> str:
    """Return the JSON chat text of a Disconnect packet (login or play)."""
    return read_utf(stream)


# =====================================================================
# Play (clientbound)
# =====================================================================


@dataclass
class KeepAlive:
    """Liveness probe; the body is echoed back unchanged."""

    payload: bytes

    @classmethod
    def parse(cls, stream: io.BytesIO) -> KeepAlive:
        return cls(stream.read())


@dataclass
class Ping:
    """Play-state ping; answered with a Pong carrying the same body."""

    payload: bytes

    @classmethod
    def parse(cls, stream: io.BytesIO) -> Ping:
        return cls(stream.read())


@dataclass
class ChatMessage:
    json_text: str
    position: int  # 0 = chat, 1 = system, 2 = game info
    sender: uuid.UUID

    @classmethod
    def parse(cls, stream: io.BytesIO) -> ChatMessage:
        json_text = read_utf(stream)
        position = read_unsigned_byte(stream)
        sender = read_uuid(stream)
        return cls(json_text, position, sender)


@dataclass
class Disconnect:
    reason_json: str

    @classmethod
    def parse(cls, stream: io.BytesIO) -> Disconnect:
        return cls(parse_disconnect_reason(stream))


@dataclass
class PlayerInfo:
    """Roster update.

    ``added`` holds ``(uuid, name)`` pairs for action 0, ``removed`` the
    UUIDs of action 4.  Other actions are parsed for alignment only.
    """

    action: int
    added: list[tuple[uuid.UUID, str]] = field(default_factory=list)
    removed: list[uuid.UUID] = field(default_factory=list)
    updated: list[uuid.UUID] = field(default_factory=list)

    @classmethod
    def parse(cls, stream: io.BytesIO) -> PlayerInfo:
        action = read_varint(stream)
        count = read_varint(stream)
        if count < 0:
            raise DecodeError(f"Negative player_info entry count: {count}")
        if action > PLAYER_INFO_REMOVE or action < 0:
            raise DecodeError(f"Unknown player_info action: {action}")

        info = cls(action)
        for _ in range(count):
            player_id = read_uuid(stream)
            if action == PLAYER_INFO_ADD:
                info.added.append((player_id, _read_add_entry(stream)))
            elif action == PLAYER_INFO_REMOVE:
                info.removed.append(player_id)
            else:
                _skip_update_entry(action, stream)
                info.updated.append(player_id)

        leftover = len(stream.read())
        if leftover:
            raise DecodeError(f"player_info left {leftover} unconsumed byte(s)")
        return info


def _read_add_entry(stream: io.BytesIO) -> str:
    """Read the name of an add entry and skip the remaining sub-fields."""
    name = read_utf(stream)
    properties = read_varint(stream)
    for _ in range(properties):
        skip_utf(stream)  # property name
        skip_utf(stream)  # property value
        if read_bool(stream):
            skip_utf(stream)  # signature
    read_varint(stream)  # game mode
    read_varint(stream)  # ping
    if read_bool(stream):
        skip_utf(stream)  # display name
    return name


def _skip_update_entry(action: int, stream: io.BytesIO) -> None:
    if action in (PLAYER_INFO_GAME_MODE, PLAYER_INFO_LATENCY):
        read_varint(stream)
    elif action == PLAYER_INFO_DISPLAY_NAME:
        if read_bool(stream):
            skip_utf(stream)


PlayPacket = Union[KeepAlive, Ping, ChatMessage, Disconnect, PlayerInfo]

PLAY_DECODERS: dict[int, Callable[[io.BytesIO], PlayPacket]] = {
    CB_KEEP_ALIVE: KeepAlive.parse,
    CB_PING: Ping.parse,
    CB_CHAT_MESSAGE: ChatMessage.parse,
    CB_DISCONNECT: Disconnect.parse,
    CB_PLAYER_INFO: PlayerInfo.parse,
}


def decode_play_packet(packet_id: int, stream: io.BytesIO) -> PlayPacket | None:
    """Decode a play-state body, or return None for packet IDs not handled here."""
    decoder = PLAY_DECODERS.get(packet_id)
    if decoder is None:
        return None
    return decoder(stream)


# =====================================================================
# Play (serverbound)
# =====================================================================


def build_chat_message(message: str) -> bytes:
    if len(message) > MAX_CHAT_LENGTH:
        raise ValueError(f"Chat message longer than {MAX_CHAT_LENGTH} characters")
    return build_packet(SB_CHAT_MESSAGE, write_utf(message))


def build_keep_alive(payload: bytes) -> bytes:
    return build_packet(SB_KEEP_ALIVE, payload)


def build_pong(payload: bytes) -> bytes:
    return build_packet(SB_PONG, payload)
