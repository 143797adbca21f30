from __future__ import annotations

import io
import uuid

import pytest

from mc_console_client.errors import DecodeError
from mc_console_client.mc_protocol import build_packet, write_utf, write_varint
from mc_console_client.packets import (
    ChatMessage,
    Handshake,
    KeepAlive,
    LoginStart,
    LoginSuccess,
    PlayerInfo,
    build_chat_message,
    build_keep_alive,
    build_pong,
    build_status_ping,
    decode_play_packet,
)

ALICE = uuid.UUID("00000000-0000-0000-0000-00000000a11c")
BOB = uuid.UUID("00000000-0000-0000-0000-000000000b0b")


def _add_entry(player_id: uuid.UUID, name: str) -> bytes:
    # zero properties, game mode 0, ping 0, no display name
    return player_id.bytes + write_utf(name) + write_varint(0) + write_varint(0) + write_varint(0) + b"\x00"


def test_handshake_wire_bytes() -> None:
    frame = Handshake(758, "127.0.0.1", 25565, 1).build()
    assert frame == b"\x10\x00\xf6\x05\x09127.0.0.1\x63\xdd\x01"


def test_handshake_and_login_start_parse_back() -> None:
    body = io.BytesIO(Handshake(758, "mc.example.org", 25566, 2).build()[2:])
    assert Handshake.parse(body) == Handshake(758, "mc.example.org", 25566, 2)
    assert LoginStart.parse(io.BytesIO(LoginStart("Steve").build()[2:])) == LoginStart("Steve")


def test_status_ping_carries_big_endian_long() -> None:
    assert build_status_ping(92233720) == build_packet(0x01, (92233720).to_bytes(8, "big"))


def test_login_success_parse() -> None:
    body = io.BytesIO(ALICE.bytes + write_utf("Alice"))
    assert LoginSuccess.parse(body) == LoginSuccess(ALICE, "Alice")


def test_player_info_add_consumes_whole_body() -> None:
    body = write_varint(0) + write_varint(1) + _add_entry(ALICE, "Alice")
    stream = io.BytesIO(body)

    info = PlayerInfo.parse(stream)

    assert info.added == [(ALICE, "Alice")]
    assert stream.tell() == len(body)


def test_player_info_add_skips_properties_and_display_name() -> None:
    first = (
        ALICE.bytes
        + write_utf("Alice")
        + write_varint(2)
        + write_utf("textures")
        + write_utf("dGV4dHVyZXM=")
        + b"\x01"
        + write_utf("signature")
        + write_utf("extra")
        + write_utf("value")
        + b"\x00"
        + write_varint(1)  # game mode
        + write_varint(42)  # ping
        + b"\x01"
        + write_utf('{"text":"Ally"}')
    )
    body = write_varint(0) + write_varint(2) + first + _add_entry(BOB, "Bob")
    stream = io.BytesIO(body)

    info = PlayerInfo.parse(stream)

    assert info.added == [(ALICE, "Alice"), (BOB, "Bob")]
    assert stream.read() == b""


def test_player_info_remove() -> None:
    body = write_varint(4) + write_varint(2) + ALICE.bytes + BOB.bytes
    assert PlayerInfo.parse(io.BytesIO(body)).removed == [ALICE, BOB]


def test_player_info_update_actions_are_parsed_for_alignment() -> None:
    latency = write_varint(2) + write_varint(1) + ALICE.bytes + write_varint(300)
    display = write_varint(3) + write_varint(2) + ALICE.bytes + b"\x01" + write_utf('"A"') + BOB.bytes + b"\x00"

    assert PlayerInfo.parse(io.BytesIO(latency)).updated == [ALICE]
    info = PlayerInfo.parse(io.BytesIO(display))
    assert info.updated == [ALICE, BOB]
    assert info.added == [] and info.removed == []


def test_player_info_unknown_action_is_decode_error() -> None:
    with pytest.raises(DecodeError):
        PlayerInfo.parse(io.BytesIO(write_varint(7) + write_varint(0)))


def test_player_info_trailing_bytes_are_decode_error() -> None:
    body = write_varint(4) + write_varint(1) + ALICE.bytes + b"\x00"
    with pytest.raises(DecodeError):
        PlayerInfo.parse(io.BytesIO(body))


def test_player_info_truncated_entry_is_decode_error() -> None:
    body = write_varint(0) + write_varint(1) + ALICE.bytes + write_utf("Alice") + write_varint(1)
    with pytest.raises(DecodeError):
        PlayerInfo.parse(io.BytesIO(body))


def test_chat_message_parse() -> None:
    body = write_utf('{"text":"hi"}') + b"\x01" + BOB.bytes
    assert ChatMessage.parse(io.BytesIO(body)) == ChatMessage('{"text":"hi"}', 1, BOB)


def test_decode_play_packet_dispatches_by_id() -> None:
    assert decode_play_packet(0x21, io.BytesIO(b"\x00" * 7 + b"\x2a")) == KeepAlive(b"\x00" * 7 + b"\x2a")
    assert decode_play_packet(0x22, io.BytesIO(b"whatever")) is None


def test_echo_packets_reuse_payload() -> None:
    payload = b"\x00\x00\x01\x8b\xcf\xe5\x68\x00"
    assert build_keep_alive(payload) == build_packet(0x0F, payload)
    assert build_pong(b"\x00\x00\x00\x07") == build_packet(0x1D, b"\x00\x00\x00\x07")


def test_chat_message_length_limit() -> None:
    assert build_chat_message("hi") == build_packet(0x03, write_utf("hi"))
    with pytest.raises(ValueError):
        build_chat_message("x" * 257)
