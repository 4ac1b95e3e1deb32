"""RFXCOM binary packet structures.

Hybrid structures: ``construct`` validates and parses the byte layout,
``msgspec`` holds the typed result.
"""

from __future__ import annotations

from typing import Any, ClassVar, Type, TypeVar

import msgspec
from construct import (  # type: ignore
    Bytes,
    Construct,
    GreedyBytes,
    Int8ub,
    Struct as BinStruct,
)

T = TypeVar("T", bound="BaseStruct")


class BaseStruct(msgspec.Struct, frozen=True):
    """Base class for hybrid Msgspec/Construct structures."""

    # Subclasses must define this schema
    _SCHEMA: ClassVar[Construct[Any]]

    @classmethod
    def decode(cls: Type[T], data: bytes | bytearray | memoryview) -> T:
        """Decode binary data into a typed Msgspec struct."""
        if not data:
            raise ValueError("Empty payload")

        container: Any = cls._SCHEMA.parse(bytes(data))
        return cls(**{k: v for k, v in container.items() if not k.startswith("_")})

    def encode(self) -> bytes:
        """Encode the typed Msgspec struct into binary data."""
        return self._SCHEMA.build(msgspec.structs.asdict(self))


class InterfaceControlPacket(BaseStruct, frozen=True):
    """Outbound mode command (packet type 0x00), always 14 bytes on the wire."""

    length: int
    packet_type: int
    sub_type: int
    seq_nbr: int
    command: int
    msg1: int
    msg2: int
    msg3: int
    msg4: int
    msg5: int
    msg6: int
    msg7: int
    msg8: int
    msg9: int

    _SCHEMA = BinStruct(
        "length" / Int8ub,
        "packet_type" / Int8ub,
        "sub_type" / Int8ub,
        "seq_nbr" / Int8ub,
        "command" / Int8ub,
        "msg1" / Int8ub,
        "msg2" / Int8ub,
        "msg3" / Int8ub,
        "msg4" / Int8ub,
        "msg5" / Int8ub,
        "msg6" / Int8ub,
        "msg7" / Int8ub,
        "msg8" / Int8ub,
        "msg9" / Int8ub,
    )


class InterfaceStatusPacket(BaseStruct, frozen=True):
    """Interface response to GET_STATUS / SET_MODE (packet type 0x01, sub type 0x00)."""

    length: int
    packet_type: int
    sub_type: int
    seq_nbr: int
    command: int
    transceiver_type: int
    firmware_version: int
    protocols: bytes
    hardware_version1: int
    hardware_version2: int
    extra: bytes

    _SCHEMA = BinStruct(
        "length" / Int8ub,
        "packet_type" / Int8ub,
        "sub_type" / Int8ub,
        "seq_nbr" / Int8ub,
        "command" / Int8ub,
        "transceiver_type" / Int8ub,
        "firmware_version" / Int8ub,
        "protocols" / Bytes(4),
        "hardware_version1" / Int8ub,
        "hardware_version2" / Int8ub,
        "extra" / GreedyBytes,
    )


class InterfaceNoticePacket(BaseStruct, frozen=True):
    """Any other interface message: a command byte followed by free-form data."""

    length: int
    packet_type: int
    sub_type: int
    seq_nbr: int
    command: int
    data: bytes

    _SCHEMA = BinStruct(
        "length" / Int8ub,
        "packet_type" / Int8ub,
        "sub_type" / Int8ub,
        "seq_nbr" / Int8ub,
        "command" / Int8ub,
        "data" / GreedyBytes,
    )


class TransmitterPacket(BaseStruct, frozen=True):
    """Transmitter response (packet type 0x02)."""

    length: int
    packet_type: int
    sub_type: int
    seq_nbr: int
    response: int

    _SCHEMA = BinStruct(
        "length" / Int8ub,
        "packet_type" / Int8ub,
        "sub_type" / Int8ub,
        "seq_nbr" / Int8ub,
        "response" / Int8ub,
    )


class DevicePacket(BaseStruct, frozen=True):
    """Generic device packet: common header and the undecoded body."""

    length: int
    packet_type: int
    sub_type: int
    seq_nbr: int
    data: bytes

    _SCHEMA = BinStruct(
        "length" / Int8ub,
        "packet_type" / Int8ub,
        "sub_type" / Int8ub,
        "seq_nbr" / Int8ub,
        "data" / GreedyBytes,
    )
