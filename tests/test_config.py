"""Tests for bridge settings validation."""

from __future__ import annotations

import logging

import pytest
from rfxbridge.config.settings import BridgeConfig, ProtocolFlags, load_bridge_config
from rfxbridge.const import DEFAULT_BRIDGE_UID, DEFAULT_RESET_DELAY, DEFAULT_TCP_PORT, DEFAULT_TRANSMIT_POWER
from rfxbridge.errors import ConfigurationError


def test_defaults() -> None:
    config = load_bridge_config({})
    assert config.serial_port is None
    assert config.port == DEFAULT_TCP_PORT
    assert config.transmit_power == DEFAULT_TRANSMIT_POWER
    assert config.reset_delay == DEFAULT_RESET_DELAY
    assert config.uid == DEFAULT_BRIDGE_UID
    assert config.protocols == ProtocolFlags()
    assert config.transport_kind is None
    assert config.endpoint is None


def test_camel_case_keys() -> None:
    config = load_bridge_config(
        {
            "serialPort": "/dev/ttyUSB1",
            "ignoreConfig": True,
            "setMode": "0D00000803002700000000000000",
            "transmitPower": 5,
            "responseTimeout": 2.5,
            "enableX10": True,
            "enableOregonScientific": True,
        }
    )
    assert config.serial_port == "/dev/ttyUSB1"
    assert config.ignore_config is True
    assert config.set_mode == "0D00000803002700000000000000"
    assert config.transmit_power == 5
    assert config.response_timeout == 2.5
    assert config.protocols.enable_x10
    assert config.protocols.enable_oregon_scientific
    assert not config.protocols.enable_arc


def test_snake_case_keys_and_nested_protocols() -> None:
    config = load_bridge_config(
        {
            "host": "rfxlan.local",
            "port": 10002,
            "ignore_config": True,
            "enable_arc": True,
            "protocols": {"enableAC": True, "enable_keeloq": True},
        }
    )
    assert config.host == "rfxlan.local"
    assert config.ignore_config
    assert config.protocols.enable_arc
    assert config.protocols.enable_ac
    assert config.protocols.enable_keeloq


def test_unknown_keys_are_ignored() -> None:
    config = load_bridge_config({"serialPort": "/dev/ttyUSB0", "somethingElse": 1})
    assert config.serial_port == "/dev/ttyUSB0"


@pytest.mark.parametrize(
    "raw",
    [
        {"port": 0},
        {"port": 70000},
        {"transmitPower": 14},
        {"transmitPower": -19},
        {"responseTimeout": 0},
        {"resetDelay": -1},
        {"uid": ""},
        {"enableX10": "maybe"},
    ],
)
def test_invalid_values_raise_configuration_error(raw: dict) -> None:
    with pytest.raises(ConfigurationError):
        load_bridge_config(raw)


def test_direct_construction_validates() -> None:
    with pytest.raises(ConfigurationError):
        BridgeConfig(transmit_power=20)
    with pytest.raises(ConfigurationError):
        BridgeConfig(check_interval=0)


def test_blank_selectors_are_unset() -> None:
    config = BridgeConfig(serial_port="  ", bridge_id="", host="lan")
    assert config.serial_port is None
    assert config.bridge_id is None
    assert config.transport_kind == "tcp"
    assert config.endpoint == f"lan:{DEFAULT_TCP_PORT}"


@pytest.mark.parametrize(
    ("values", "kind", "endpoint"),
    [
        ({"serial_port": "/dev/ttyUSB0", "bridge_id": "A1", "host": "lan"}, "serial", "/dev/ttyUSB0"),
        ({"bridge_id": "A1", "host": "lan"}, "ftdi", "A1"),
        ({"host": "lan", "port": 4000}, "tcp", "lan:4000"),
    ],
)
def test_transport_precedence(values: dict, kind: str, endpoint: str) -> None:
    config = BridgeConfig(**values)
    assert config.transport_kind == kind
    assert config.endpoint == endpoint


def test_several_selectors_log_a_warning(caplog) -> None:
    with caplog.at_level(logging.WARNING):
        BridgeConfig(serial_port="/dev/ttyUSB0", host="lan")
    assert "Several transports configured" in caplog.text


def test_mode_bytes_bit_positions() -> None:
    assert ProtocolFlags().mode_bytes() == bytes(4)
    assert ProtocolFlags(enable_undecoded=True).mode_bytes() == bytes([0x80, 0, 0, 0])
    assert ProtocolFlags(enable_ae_blyss=True).mode_bytes() == bytes([0x01, 0, 0, 0])
    assert ProtocolFlags(enable_blinds_t1_t2_t3_t4=True).mode_bytes() == bytes([0, 0x80, 0, 0])
    assert ProtocolFlags(enable_mertik=True).mode_bytes() == bytes([0, 0x01, 0, 0])
    assert ProtocolFlags(enable_visonic=True).mode_bytes() == bytes([0, 0, 0x80, 0])
    assert ProtocolFlags(enable_x10=True).mode_bytes() == bytes([0, 0, 0x01, 0])
    assert ProtocolFlags(enable_home_confort=True).mode_bytes() == bytes([0, 0, 0, 0x02])
    assert ProtocolFlags(enable_keeloq=True).mode_bytes() == bytes([0, 0, 0, 0x01])


def test_common_433_protocols() -> None:
    flags = ProtocolFlags(enable_oregon_scientific=True, enable_ac=True, enable_arc=True, enable_x10=True)
    assert flags.mode_bytes() == bytes([0x00, 0x00, 0x27, 0x00])
