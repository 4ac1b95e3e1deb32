"""Status, statistics and transceiver information exposed by the bridge."""

from __future__ import annotations

import time
from enum import Enum
from typing import Any

import msgspec

from .protocol.protocol import TransceiverType


class StatusDetail(str, Enum):
    NONE = "none"
    COMMUNICATION_ERROR = "communication_error"
    CONFIGURATION_ERROR = "configuration_error"


class BridgeStatus(msgspec.Struct, frozen=True):
    """Online/offline status as reported to the host application."""

    online: bool
    detail: StatusDetail = StatusDetail.NONE
    description: str | None = None

    @classmethod
    def offline(cls, detail: StatusDetail = StatusDetail.NONE, description: str | None = None) -> BridgeStatus:
        return cls(online=False, detail=detail, description=description)

    def as_dict(self) -> dict[str, Any]:
        return {
            "online": self.online,
            "detail": self.detail.value,
            "description": self.description,
        }


ONLINE = BridgeStatus(online=True)
OFFLINE = BridgeStatus.offline()


class TransceiverInfo(msgspec.Struct, frozen=True):
    """Identity reported in the interface response to GET_STATUS."""

    transceiver_type: int
    firmware_version: int | None = None
    hardware_version: str | None = None
    protocols: bytes = b""

    @property
    def type_name(self) -> str:
        try:
            return TransceiverType(self.transceiver_type).name
        except ValueError:
            return f"0x{self.transceiver_type:02X}"

    def as_dict(self) -> dict[str, Any]:
        return {
            "transceiver_type": self.transceiver_type,
            "type_name": self.type_name,
            "firmware_version": self.firmware_version,
            "hardware_version": self.hardware_version,
            "protocols": self.protocols.hex().upper(),
        }


class BridgeStats(msgspec.Struct):
    """Monotonic counters describing bridge activity."""

    packets_received: int = 0
    device_messages: int = 0
    not_implemented: int = 0
    decode_errors: int = 0
    messages_sent: int = 0
    acks: int = 0
    naks: int = 0
    timeouts: int = 0
    send_failures: int = 0
    sequence_mismatches: int = 0
    listener_errors: int = 0
    connect_attempts: int = 0
    connect_failures: int = 0
    last_rx_unix: float = 0.0
    last_online_unix: float = 0.0

    def record_rx(self) -> None:
        self.packets_received += 1
        self.last_rx_unix = time.time()

    def as_dict(self) -> dict[str, Any]:
        return msgspec.structs.asdict(self)
