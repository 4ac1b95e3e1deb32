"""Configuration helpers for the RFXCOM bridge."""

from .settings import (  # noqa: F401
    TRANSPORT_FTDI,
    TRANSPORT_SERIAL,
    TRANSPORT_TCP,
    BridgeConfig,
    ProtocolFlags,
    load_bridge_config,
)
from . import logging  # noqa: F401  # pyright: ignore[reportUnusedImport]
