"""A single TCP session to the server and its protocol state."""

from __future__ import annotations

import asyncio
import enum
import io
import logging

from .errors import ClientConnectionError, ProtocolMismatch
from .mc_protocol import read_packet

log = logging.getLogger(__name__)


class ProtocolState(enum.Enum):
    """Connection states of the protocol."""

    HANDSHAKE = "HANDSHAKE"
    STATUS = "STATUS"
    LOGIN = "LOGIN"
    PLAY = "PLAY"


# Allowed transitions: from_state → {set of valid to_states}
_VALID_TRANSITIONS: dict[ProtocolState, set[ProtocolState]] = {
    ProtocolState.HANDSHAKE: {ProtocolState.STATUS, ProtocolState.LOGIN},
    ProtocolState.STATUS: set(),
    ProtocolState.LOGIN: {ProtocolState.PLAY},
    ProtocolState.PLAY: set(),
}


class Connection:
    """Owns the asyncio stream pair of one session.

    Only the coroutine driving the session reads, writes or changes
    ``state``; nothing else is given a reference.

    Parameters
    ----------
    reader, writer:
        Stream pair returned by :func:`asyncio.open_connection`.
    peer:
        ``host:port`` label used in log messages.
    """

    def __init__(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter, peer: str = "?"):
        self._reader = reader
        self._writer = writer
        self.peer = peer
        self.state = ProtocolState.HANDSHAKE

    @classmethod
    async def open(cls, host: str, port: int, timeout: float | None = None) -> Connection:
        """Connect to *host*:*port*.

        Raises
        ------
        ClientConnectionError
            If the connection cannot be established within *timeout* seconds.
        """
        peer = f"{host}:{port}"
        try:
            reader, writer = await asyncio.wait_for(asyncio.open_connection(host, port), timeout=timeout)
        except (OSError, TimeoutError, asyncio.TimeoutError) as exc:
            reason = str(exc) or "timed out"
            raise ClientConnectionError(f"Cannot connect to {peer}: {reason}") from exc
        log.debug(f"Connected to {peer}")
        return cls(reader, writer, peer)

    # -- Transitions ----------------------------------------------------------

    def transition(self, new_state: ProtocolState) -> None:
        """Move to *new_state*, enforcing the valid-transition graph."""
        if new_state == self.state:
            return

        if new_state not in _VALID_TRANSITIONS[self.state]:
            raise ProtocolMismatch(f"Invalid protocol transition {self.state.value} → {new_state.value}")

        old = self.state
        self.state = new_state
        log.info(f"Session {self.peer}: {old.value} → {new_state.value}")

    # -- I/O ------------------------------------------------------------------

    async def send(self, frame: bytes) -> None:
        """Write one complete frame and wait until it is flushed."""
        try:
            self._writer.write(frame)
            await self._writer.drain()
        except OSError as exc:
            raise ClientConnectionError(f"Write to {self.peer} failed: {exc}") from exc

    async def receive(self) -> tuple[int, io.BytesIO]:
        """Block until the next frame arrives; see :func:`read_packet`."""
        packet_id, stream = await read_packet(self._reader)
        log.debug(f"{self.state.value} packet 0x{packet_id:02X} ({len(stream.getvalue())} bytes)")
        return packet_id, stream

    async def close(self) -> None:
        if self._writer.is_closing():
            return
        self._writer.close()
        try:
            await self._writer.wait_closed()
        except OSError as exc:
            log.debug(f"Error while closing {self.peer}: {exc}")
