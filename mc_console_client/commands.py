"""Interactive command capture.

A background thread reads console lines and pushes them onto a
:class:`CommandQueue`; the play loop drains the queue between packets.
"""

from __future__ import annotations

import logging
import sys
import threading
from typing import TextIO

log = logging.getLogger(__name__)


class CommandQueue:
    """Ordered, lock-guarded list of trimmed, non-empty command lines."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._lines: list[str] = []

    def push(self, line: str) -> bool:
        """Queue *line* after trimming.  Returns False if it was blank."""
        line = line.strip()
        if not line:
            return False
        with self._lock:
            self._lines.append(line)
        return True

    def drain(self) -> list[str]:
        """Remove and return every queued line, oldest first."""
        with self._lock:
            lines, self._lines = self._lines, []
        return lines

    def __len__(self) -> int:
        with self._lock:
            return len(self._lines)


class ConsoleReader(threading.Thread):
    """Daemon thread feeding console lines into a :class:`CommandQueue`.

    Never touches the network.  Stops at end of input.
    """

    def __init__(self, queue: CommandQueue, stream: TextIO | None = None):
        super().__init__(name="console-reader", daemon=True)
        self._queue = queue
        self._stream = stream if stream is not None else sys.stdin

    def run(self) -> None:
        while True:
            try:
                line = self._stream.readline()
            except (OSError, ValueError) as exc:
                log.error(f"Error reading from console: {exc}")
                return
            if not line:
                log.info("Console input closed")
                return
            self._queue.push(line)
