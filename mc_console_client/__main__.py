"""Entry point for the console client.

Run with:  python -m mc_console_client [--config /path/to/config.yaml]
"""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import dataclasses
import logging
import sys

from . import __version__
from .client import run_client
from .commands import CommandQueue, ConsoleReader
from .config import AppConfig, ConfigError, load_config, validate
from .errors import ClientError, ServerDisconnect
from .logger import setup_logging

log = logging.getLogger("mc_console_client")


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="mc-console-client",
        description="Chat on a Minecraft Java Edition server (protocol 758) from the terminal.",
    )
    parser.add_argument(
        "-c",
        "--config",
        default=None,
        help="Path to YAML config file (default: built-in defaults)",
    )
    parser.add_argument("--host", help="Server host (overrides config)")
    parser.add_argument("--port", type=int, help="Server port (overrides config)")
    parser.add_argument("--username", help="Offline-mode username (overrides config)")
    parser.add_argument(
        "--no-status",
        action="store_true",
        help="Skip the initial status request",
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> AppConfig:
    """Load the config file and apply command-line overrides."""
    cfg = load_config(args.config)
    server_overrides = {
        key: value
        for key, value in (("host", args.host), ("port", args.port))
        if value is not None
    }
    if server_overrides:
        cfg.server = dataclasses.replace(cfg.server, **server_overrides)
    if args.username is not None:
        cfg.player = dataclasses.replace(cfg.player, username=args.username)
    return validate(cfg)


def main(argv: list[str] | None = None) -> int:
    """Synchronous wrapper: configure, start the console reader, run the session."""
    # Minimal logging before config is loaded so early errors are visible.
    logging.basicConfig(
        level=logging.WARNING,
        format="%(asctime)s %(levelname)-5s %(message)s",
        stream=sys.stderr,
    )
    args = _parse_args(argv)

    try:
        cfg = build_config(args)
    except ConfigError as exc:
        log.critical(f"Configuration error: {exc}")
        return 2

    setup_logging(cfg.logging)
    log.info(f"mc-console-client v{__version__} connecting to {cfg.server.host}:{cfg.server.port}")

    commands = CommandQueue()
    ConsoleReader(commands).start()

    try:
        with contextlib.suppress(KeyboardInterrupt):
            asyncio.run(run_client(cfg, commands, fetch_initial_status=not args.no_status))
    except ServerDisconnect as exc:
        print(exc, file=sys.stderr)
        return 1
    except ClientError as exc:
        log.critical(f"{type(exc).__name__}: {exc}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
