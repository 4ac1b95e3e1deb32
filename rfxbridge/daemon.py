#!/usr/bin/env python3
"""Standalone daemon around :class:`rfxbridge.bridge.RFXComBridge`.

Opens the configured transceiver link, logs every device message it
receives and keeps the link supervised until SIGINT or SIGTERM.

Settings come from an optional TOML file (``--config``) with command line
flags taking precedence. TOML keys use the same names as the bridge settings
(``serialPort``, ``ignoreConfig``, ``enableX10``...).
"""

from __future__ import annotations

import argparse
import logging
import signal
import sys
import threading
import tomllib
from collections.abc import Sequence
from pathlib import Path
from types import FrameType
from typing import Any

from rfxbridge import __version__
from rfxbridge.bridge import RFXComBridge
from rfxbridge.config.logging import configure_logging
from rfxbridge.config.settings import load_bridge_config
from rfxbridge.errors import ConfigurationError
from rfxbridge.protocol.messages import Message
from rfxbridge.state import BridgeStatus

logger = logging.getLogger("rfxbridge.daemon")


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rfxbridge",
        description="Bridge controller for RFXCOM 433 MHz transceivers.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    link = parser.add_argument_group("link")
    link.add_argument("--serial-port", dest="serialPort", help="Serial device, e.g. /dev/ttyUSB0")
    link.add_argument("--bridge-id", dest="bridgeId", help="FTDI serial number of a USB bridge")
    link.add_argument("--host", dest="host", help="Host name of a network transceiver")
    link.add_argument("--port", dest="port", type=int, help="TCP port (default 10001)")
    parser.add_argument(
        "--ignore-config",
        dest="ignoreConfig",
        action="store_true",
        default=None,
        help="Do not send a SET_MODE command after the status query",
    )
    parser.add_argument("--set-mode", dest="setMode", help="Literal 14-byte SET_MODE frame in hex")
    parser.add_argument("--config", type=Path, help="TOML file with bridge settings")
    parser.add_argument("--debug", dest="debug", action="store_true", default=None, help="Enable debug logging")
    return parser


def load_settings(args: argparse.Namespace) -> dict[str, Any]:
    """Merge the TOML file (if any) with command line overrides."""
    raw: dict[str, Any] = {}
    if args.config is not None:
        try:
            data = tomllib.loads(args.config.read_text())
        except (OSError, tomllib.TOMLDecodeError) as exc:
            raise ConfigurationError(f"Cannot read {args.config}: {exc}") from exc
        # Allow the settings to live under an [rfxcom] table.
        raw.update(data.get("rfxcom", data))

    for key, value in vars(args).items():
        if key == "config" or value is None:
            continue
        raw[key] = value
    return raw


def _log_device_message(source_id: str, message: Message) -> None:
    logger.info("Device message from %s: %s", source_id, message)


def _log_status(status: BridgeStatus) -> None:
    if status.online:
        logger.info("Bridge ONLINE")
    else:
        logger.warning("Bridge OFFLINE (%s) %s", status.detail.value, status.description or "")


def run(argv: Sequence[str] | None = None) -> int:
    args = build_arg_parser().parse_args(argv)
    try:
        config = load_bridge_config(load_settings(args))
    except ConfigurationError as exc:
        configure_logging(bool(args.debug))
        logger.critical("%s", exc)
        return 2

    configure_logging(config.debug_logging)
    if config.transport_kind is None:
        logger.critical("Configure one of --serial-port, --bridge-id or --host")
        return 2

    stop_requested = threading.Event()

    def _request_stop(signum: int, _frame: FrameType | None) -> None:
        logger.info("Received %s; shutting down", signal.Signals(signum).name)
        stop_requested.set()

    signal.signal(signal.SIGINT, _request_stop)
    signal.signal(signal.SIGTERM, _request_stop)

    bridge = RFXComBridge(config, status_callback=_log_status)
    bridge.register(_log_device_message)
    bridge.start()
    try:
        stop_requested.wait()
    finally:
        bridge.stop()
    logger.info("Final statistics: %s", bridge.stats.as_dict())
    return 0


def main() -> None:  # pragma: no cover (entry point wrapper)
    sys.exit(run())


if __name__ == "__main__":
    main()
