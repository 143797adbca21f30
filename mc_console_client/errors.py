"""Error taxonomy for the console client.

Transport and framing errors are fatal to the run; ``DecodeError`` is
raised while interpreting a packet body and is recovered from in the
play loop because the frame boundary is already known.
"""

from __future__ import annotations


class ClientError(Exception):
    """Base class for every error raised by the client core."""


class ClientConnectionError(ClientError):
    """Connect, read or write on the server socket failed."""


class MalformedVarInt(ClientError, ValueError):
    """A VarInt needed more than 5 bytes, or a frame length is out of range."""


class ProtocolMismatch(ClientError):
    """The server sent something this client cannot continue from."""


class DecodeError(ClientError, ValueError):
    """A field inside a packet body is truncated or not valid UTF-8 / JSON."""


class ServerDisconnect(ClientError):
    """The server refused the login with a disconnect packet."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Disconnected by server: {reason}")
