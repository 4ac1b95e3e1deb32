"""RFXCOM wire protocol: framing, structures and message codec."""

from __future__ import annotations

from .frame import PacketFramer, frame
from .messages import (
    DeviceMessage,
    InterfaceControlMessage,
    InterfaceMessage,
    Message,
    TransmitterMessage,
    decode,
    encode,
)
from .protocol import (
    CMD_GET_STATUS,
    CMD_RESET,
    CMD_START_RECEIVER,
    InterfaceCommand,
    InterfaceSubType,
    PacketType,
    TransceiverType,
    TransmitterResponse,
)

__all__ = [
    "CMD_GET_STATUS",
    "CMD_RESET",
    "CMD_START_RECEIVER",
    "DeviceMessage",
    "InterfaceCommand",
    "InterfaceControlMessage",
    "InterfaceMessage",
    "InterfaceSubType",
    "Message",
    "PacketFramer",
    "PacketType",
    "TransceiverType",
    "TransmitterMessage",
    "TransmitterResponse",
    "decode",
    "encode",
    "frame",
]
