"""Settings for the RFXCOM bridge.

Configuration arrives as a flat mapping (CLI flags, a TOML file or the host
application's own store) and is validated by :mod:`.schema` before being
turned into a :class:`BridgeConfig`.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Final

import msgspec
from marshmallow import ValidationError

from ..const import (
    DEFAULT_BRIDGE_UID,
    DEFAULT_CHECK_INTERVAL,
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_RESET_DELAY,
    DEFAULT_RESPONSE_TIMEOUT,
    DEFAULT_TCP_PORT,
    DEFAULT_TRANSMIT_POWER,
    MAX_TRANSMIT_POWER,
    MIN_TRANSMIT_POWER,
)
from ..errors import ConfigurationError

logger = logging.getLogger(__name__)

TRANSPORT_SERIAL: Final[str] = "serial"
TRANSPORT_FTDI: Final[str] = "ftdi"
TRANSPORT_TCP: Final[str] = "tcp"


class ProtocolFlags(msgspec.Struct, frozen=True):
    """Per-protocol receive flags encoded into the synthesized SET_MODE."""

    # msg3
    enable_undecoded: bool = False
    enable_imagintronix_opus: bool = False
    enable_byron_sx: bool = False
    enable_rsl: bool = False
    enable_lighting4: bool = False
    enable_fineoffset_viking: bool = False
    enable_rubicson: bool = False
    enable_ae_blyss: bool = False
    # msg4
    enable_blinds_t1_t2_t3_t4: bool = False
    enable_blinds_t0: bool = False
    enable_proguard: bool = False
    enable_fs20: bool = False
    enable_la_crosse: bool = False
    enable_hideki_upm: bool = False
    enable_ad_lightwave_rf: bool = False
    enable_mertik: bool = False
    # msg5
    enable_visonic: bool = False
    enable_ati: bool = False
    enable_oregon_scientific: bool = False
    enable_meiantech: bool = False
    enable_home_easy_eu: bool = False
    enable_ac: bool = False
    enable_arc: bool = False
    enable_x10: bool = False
    # msg6
    enable_home_confort: bool = False
    enable_keeloq: bool = False

    def mode_bytes(self) -> bytes:
        """Return msg3..msg6 of the SET_MODE command."""
        msg3 = _pack_bits(
            self.enable_undecoded,
            self.enable_imagintronix_opus,
            self.enable_byron_sx,
            self.enable_rsl,
            self.enable_lighting4,
            self.enable_fineoffset_viking,
            self.enable_rubicson,
            self.enable_ae_blyss,
        )
        msg4 = _pack_bits(
            self.enable_blinds_t1_t2_t3_t4,
            self.enable_blinds_t0,
            self.enable_proguard,
            self.enable_fs20,
            self.enable_la_crosse,
            self.enable_hideki_upm,
            self.enable_ad_lightwave_rf,
            self.enable_mertik,
        )
        msg5 = _pack_bits(
            self.enable_visonic,
            self.enable_ati,
            self.enable_oregon_scientific,
            self.enable_meiantech,
            self.enable_home_easy_eu,
            self.enable_ac,
            self.enable_arc,
            self.enable_x10,
        )
        msg6 = _pack_bits(
            False,
            False,
            False,
            False,
            False,
            False,
            self.enable_home_confort,
            self.enable_keeloq,
        )
        return bytes([msg3, msg4, msg5, msg6])


def _pack_bits(*flags: bool) -> int:
    """Pack flags most-significant bit first."""
    value = 0
    for flag in flags:
        value = (value << 1) | int(bool(flag))
    return value


@dataclass(slots=True)
class BridgeConfig:
    """Strongly typed configuration for one bridge instance."""

    serial_port: str | None = None
    bridge_id: str | None = None
    host: str | None = None
    port: int = DEFAULT_TCP_PORT
    ignore_config: bool = False
    set_mode: str | None = None
    transmit_power: int = DEFAULT_TRANSMIT_POWER
    protocols: ProtocolFlags = field(default_factory=ProtocolFlags)
    response_timeout: float = DEFAULT_RESPONSE_TIMEOUT
    reset_delay: float = DEFAULT_RESET_DELAY
    check_interval: float = DEFAULT_CHECK_INTERVAL
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT
    uid: str = DEFAULT_BRIDGE_UID
    debug_logging: bool = False

    def __post_init__(self) -> None:
        self.serial_port = _optional_str(self.serial_port)
        self.bridge_id = _optional_str(self.bridge_id)
        self.host = _optional_str(self.host)
        self.set_mode = _optional_str(self.set_mode)

        if not 1 <= int(self.port) <= 65535:
            raise ConfigurationError(f"port must be within 1..65535 (got {self.port})")
        if not MIN_TRANSMIT_POWER <= int(self.transmit_power) <= MAX_TRANSMIT_POWER:
            raise ConfigurationError(
                f"transmit_power must be within {MIN_TRANSMIT_POWER}..{MAX_TRANSMIT_POWER} dBm"
            )
        for name in ("response_timeout", "check_interval", "connect_timeout"):
            if float(getattr(self, name)) <= 0.0:
                raise ConfigurationError(f"{name} must be a positive number")
        if float(self.reset_delay) < 0.0:
            raise ConfigurationError("reset_delay must not be negative")

        selectors = [kind for kind, value in self._selectors() if value]
        if len(selectors) > 1:
            logger.warning(
                "Several transports configured (%s); using %s",
                ", ".join(selectors),
                selectors[0],
            )

    def _selectors(self) -> tuple[tuple[str, str | None], ...]:
        return (
            (TRANSPORT_SERIAL, self.serial_port),
            (TRANSPORT_FTDI, self.bridge_id),
            (TRANSPORT_TCP, self.host),
        )

    @property
    def transport_kind(self) -> str | None:
        """Selected transport: serial first, then FTDI bridge id, then host."""
        for kind, value in self._selectors():
            if value:
                return kind
        return None

    @property
    def endpoint(self) -> str | None:
        kind = self.transport_kind
        if kind == TRANSPORT_SERIAL:
            return self.serial_port
        if kind == TRANSPORT_FTDI:
            return self.bridge_id
        if kind == TRANSPORT_TCP:
            return f"{self.host}:{self.port}"
        return None


def _optional_str(value: str | None) -> str | None:
    if value is None:
        return None
    candidate = str(value).strip()
    return candidate or None


def load_bridge_config(raw: Mapping[str, Any]) -> BridgeConfig:
    """Validate *raw* settings and build a :class:`BridgeConfig`."""
    from .schema import BridgeConfigSchema

    try:
        loaded: BridgeConfig = BridgeConfigSchema().load(dict(raw))
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid bridge configuration: {exc.messages}") from exc
    return loaded
