"""Pytest configuration for rfxbridge tests."""

from __future__ import annotations

import logging
from collections.abc import Iterator

import pytest
from rfxbridge.bridge import RFXComBridge
from rfxbridge.protocol.protocol import CMD_GET_STATUS, CMD_START_RECEIVER
from rfxbridge.state import BridgeStatus

from tests.mocks import ScriptedTransport, TransportPool, make_config, receiver_started, status_response, wait_for


@pytest.fixture(autouse=True)
def reset_logging_handlers() -> Iterator[None]:
    """Close and remove all logging handlers after each test to prevent ResourceWarnings."""
    yield
    root = logging.getLogger()
    for handler in root.handlers[:]:
        try:
            handler.close()
        except (OSError, RuntimeError):
            pass
        root.removeHandler(handler)


@pytest.fixture
def transceiver() -> ScriptedTransport:
    """A transport that answers the start-up handshake like an RFXtrx433E."""
    return ScriptedTransport(
        {
            CMD_GET_STATUS: [status_response()],
            CMD_START_RECEIVER: [receiver_started()],
        }
    )


@pytest.fixture
def statuses() -> list[BridgeStatus]:
    return []


@pytest.fixture
def running_bridge(transceiver: ScriptedTransport, statuses: list[BridgeStatus]) -> Iterator[RFXComBridge]:
    bridge = RFXComBridge(
        make_config(),
        transport_factory=TransportPool(transceiver),
        status_callback=statuses.append,
    )
    bridge.start()
    try:
        assert wait_for(lambda: bridge.status().online), "bridge did not come online"
        yield bridge
    finally:
        bridge.stop()
