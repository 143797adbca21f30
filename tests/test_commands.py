from __future__ import annotations

import io
import threading

from mc_console_client.commands import CommandQueue, ConsoleReader


def test_push_trims_and_skips_blank_lines() -> None:
    queue = CommandQueue()
    assert queue.push("  hello \n") is True
    assert queue.push("   \n") is False
    assert queue.drain() == ["hello"]


def test_drain_returns_push_order_and_clears() -> None:
    queue = CommandQueue()
    for line in ("list", "say one", "help"):
        queue.push(line)
    assert queue.drain() == ["list", "say one", "help"]
    assert queue.drain() == []
    assert len(queue) == 0


def test_console_reader_feeds_queue_until_eof() -> None:
    queue = CommandQueue()
    reader = ConsoleReader(queue, io.StringIO("hello\n\n  list  \nquit"))
    reader.start()
    reader.join(timeout=5)

    assert not reader.is_alive()
    assert queue.drain() == ["hello", "list", "quit"]


def test_concurrent_pushes_are_not_lost() -> None:
    queue = CommandQueue()

    def _producer(tag: str) -> None:
        for i in range(200):
            queue.push(f"{tag}-{i}")

    threads = [threading.Thread(target=_producer, args=(t,)) for t in "abcd"]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    lines = queue.drain()
    assert len(lines) == 800
    assert [line for line in lines if line.startswith("a-")] == [f"a-{i}" for i in range(200)]
