"""Minecraft Java Edition wire primitives.

Implements the pieces of the protocol every packet is built from:
- VarInt encoding and decoding.
- Big-endian fixed-width integers, booleans, UUIDs and VarInt-prefixed
  UTF-8 strings, read from a ``BytesIO`` cursor over one packet body.
- Length-prefixed framing on an asyncio stream.

Reference: https://minecraft.wiki/w/Protocol
"""

from __future__ import annotations

import io
import struct
import uuid
from typing import Any

from .errors import ClientConnectionError, DecodeError, MalformedVarInt

# Largest frame the server may send without compression (3-byte VarInt).
MAX_PACKET_LENGTH = 2_097_151

_SEGMENT_BITS = 0x7F
_CONTINUE_BIT = 0x80

# =====================================================================
# VarInt helpers
# =====================================================================


def _to_signed32(value: int) -> int:
    value &= 0xFFFFFFFF
    if value & (1 << 31):
        value -= 1 << 32
    return value


def read_varint(stream: io.BytesIO) -> int:
    """Read a Minecraft VarInt from a byte stream."""
    result = 0
    for i in range(5):  # VarInt is at most 5 bytes
        byte = stream.read(1)
        if not byte:
            raise DecodeError("Unexpected end of packet while reading VarInt")
        b = byte[0]
        result |= (b & _SEGMENT_BITS) << (7 * i)
        if not (b & _CONTINUE_BIT):
            break
    else:
        raise MalformedVarInt("VarInt is too big")
    # Bits past the 32nd in the 5th byte are dropped, then sign-extend.
    return _to_signed32(result)


def decode_varint(data: bytes, offset: int = 0) -> tuple[int, int]:
    """Decode the VarInt at *offset* in *data*.

    Returns ``(value, bytes_consumed)``.
    """
    stream = io.BytesIO(data)
    stream.seek(offset)
    value = read_varint(stream)
    return value, stream.tell() - offset


def write_varint(value: int) -> bytes:
    """Encode a signed 32-bit integer as a Minecraft VarInt."""
    if not -(1 << 31) <= value < (1 << 31):
        raise ValueError(f"VarInt out of 32-bit range: {value}")
    # Treat as unsigned 32-bit for encoding.
    value &= 0xFFFFFFFF
    out = bytearray()
    while True:
        byte = value & _SEGMENT_BITS
        value >>= 7
        if value:
            byte |= _CONTINUE_BIT
        out.append(byte)
        if not value:
            break
    return bytes(out)


# =====================================================================
# Field readers (packet body cursor)
# =====================================================================


def read_exact(stream: io.BytesIO, size: int, what: str = "field") -> bytes:
    """Read exactly *size* bytes or raise ``DecodeError``."""
    if size < 0:
        raise DecodeError(f"Negative length for {what}: {size}")
    data = stream.read(size)
    if len(data) < size:
        raise DecodeError(f"Unexpected end of packet while reading {what}")
    return data


def read_utf(stream: io.BytesIO) -> str:
    """Read a Minecraft-style UTF-8 string (VarInt length-prefixed)."""
    length = read_varint(stream)
    data = read_exact(stream, length, "string")
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise DecodeError(f"Invalid UTF-8 in string field: {exc}") from exc


def skip_utf(stream: io.BytesIO) -> None:
    """Advance past a string field without decoding it."""
    length = read_varint(stream)
    read_exact(stream, length, "string")


def read_bool(stream: io.BytesIO) -> bool:
    return read_exact(stream, 1, "boolean")[0] != 0


def read_unsigned_byte(stream: io.BytesIO) -> int:
    return read_exact(stream, 1, "byte")[0]


def read_unsigned_short(stream: io.BytesIO) -> int:
    """Read a big-endian unsigned short."""
    return struct.unpack(">H", read_exact(stream, 2, "unsigned short"))[0]


def read_long(stream: io.BytesIO) -> int:
    """Read a big-endian signed 64-bit long."""
    return struct.unpack(">q", read_exact(stream, 8, "long"))[0]


def read_uuid(stream: io.BytesIO) -> uuid.UUID:
    """Read a 128-bit UUID sent as two big-endian longs."""
    return uuid.UUID(bytes=read_exact(stream, 16, "UUID"))


# =====================================================================
# Field writers
# =====================================================================


def write_utf(value: str) -> bytes:
    """Encode a string as a Minecraft-style VarInt-prefixed UTF-8 string."""
    encoded = value.encode("utf-8")
    return write_varint(len(encoded)) + encoded


def write_unsigned_short(value: int) -> bytes:
    return struct.pack(">H", value)


def write_long(value: int) -> bytes:
    return struct.pack(">q", value)


# =====================================================================
# Packet framing
# =====================================================================


async def read_packet(reader: Any) -> tuple[int, io.BytesIO]:
    """Read a single MC packet from an asyncio StreamReader.

    Returns (packet_id, payload_stream).  The payload stream's position
    is right after the packet ID.  There is no read deadline: a peer
    that stalls mid-frame stalls the caller.
    """
    length = await _read_varint_async(reader)
    if length <= 0 or length > MAX_PACKET_LENGTH:
        raise MalformedVarInt(f"Invalid packet length: {length}")
    data = await _read_exactly(reader, length)
    stream = io.BytesIO(data)
    try:
        packet_id = read_varint(stream)
    except DecodeError as exc:
        raise MalformedVarInt(f"Truncated packet ID: {exc}") from exc
    return packet_id, stream


async def _read_exactly(reader: Any, size: int) -> bytes:
    try:
        return await reader.readexactly(size)
    except EOFError as exc:
        # asyncio.IncompleteReadError is an EOFError subclass.
        raise ClientConnectionError("Connection closed by server") from exc
    except OSError as exc:
        raise ClientConnectionError(f"Read failed: {exc}") from exc


async def _read_varint_async(reader: Any) -> int:
    """Read a VarInt one byte at a time from an asyncio StreamReader."""
    result = 0
    for i in range(5):
        byte = await _read_exactly(reader, 1)
        b = byte[0]
        result |= (b & _SEGMENT_BITS) << (7 * i)
        if not (b & _CONTINUE_BIT):
            break
    else:
        raise MalformedVarInt("VarInt too big")
    return _to_signed32(result)


def build_packet(packet_id: int, payload: bytes = b"") -> bytes:
    """Frame a packet: length-prefix(packet_id + payload)."""
    inner = write_varint(packet_id) + payload
    return write_varint(len(inner)) + inner
