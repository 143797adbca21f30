from __future__ import annotations

import contextlib
import logging
from collections.abc import Iterator
from logging.handlers import RotatingFileHandler
from pathlib import Path

from mc_console_client.config import LoggingConfig
from mc_console_client.logger import setup_logging


@contextlib.contextmanager
def _isolated_root_logger() -> Iterator[logging.Logger]:
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    try:
        yield root
    finally:
        for handler in list(root.handlers):
            root.removeHandler(handler)
            handler.close()
        for handler in handlers:
            root.addHandler(handler)
        root.setLevel(level)


def test_file_and_stderr_handlers(tmp_path: Path) -> None:
    log_file = tmp_path / "logs" / "client.log"
    with _isolated_root_logger() as root:
        setup_logging(LoggingConfig(level="debug", file=str(log_file)))

        assert root.level == logging.DEBUG
        assert any(isinstance(h, RotatingFileHandler) for h in root.handlers)

        logging.getLogger("mc_console_client.test").info("hello from the test")
        for handler in root.handlers:
            handler.flush()
        assert "INFO  [mc_console_client.test] hello from the test" in log_file.read_text(encoding="utf-8")


def test_stderr_only_when_no_file() -> None:
    with _isolated_root_logger() as root:
        setup_logging(LoggingConfig(level="WARNING"))
        assert root.level == logging.WARNING
        assert len(root.handlers) == 1
        assert not isinstance(root.handlers[0], RotatingFileHandler)
