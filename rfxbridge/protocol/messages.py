"""Typed RFXCOM messages and the packet codec used by the bridge.

The bridge only understands the control plane: interface messages (status,
receiver start) and transmitter acknowledgements. Every other supported
packet type is carried as an opaque :class:`DeviceMessage` whose body is left
for per-device handlers to interpret.
"""

from __future__ import annotations

from typing import Self

import msgspec
from construct import ConstructError

from ..errors import MessageDecodeError, MessageNotImplementedError
from . import protocol
from .protocol import (
    DEVICE_PACKET_TYPES,
    InterfaceCommand,
    InterfaceControlSubType,
    InterfaceSubType,
    PacketType,
    TransmitterResponse,
)
from .structures import (
    DevicePacket,
    InterfaceControlPacket,
    InterfaceNoticePacket,
    InterfaceStatusPacket,
    TransmitterPacket,
)


class Message(msgspec.Struct, frozen=True, kw_only=True):
    """Common header shared by every RFXCOM message."""

    packet_type: int
    sub_type: int = 0
    seq_nbr: int = 0

    def encode(self) -> bytes:
        raise MessageNotImplementedError(f"Encoding {type(self).__name__} is not supported")

    def with_seq(self, seq_nbr: int) -> Self:
        """Return a copy stamped with *seq_nbr*."""
        return msgspec.structs.replace(self, seq_nbr=seq_nbr & protocol.UINT8_MASK)


class InterfaceControlMessage(Message, frozen=True, kw_only=True):
    """Mode command sent to the transceiver (reset, status, set mode...)."""

    packet_type: int = PacketType.INTERFACE_CONTROL
    sub_type: int = InterfaceControlSubType.MODE_COMMAND
    command: int = InterfaceCommand.SET_MODE
    data: bytes = bytes(9)

    @classmethod
    def set_mode(
        cls,
        transceiver_type: int,
        *,
        protocol_mask: bytes = bytes(4),
        transmit_power: int = -18,
    ) -> Self:
        """Build a SET_MODE command for *transceiver_type*.

        ``protocol_mask`` holds msg3..msg6, one bit per enabled RF protocol.
        """
        if len(protocol_mask) != 4:
            raise ValueError("protocol_mask must hold exactly 4 bytes (msg3..msg6)")
        power = (transmit_power + 18) & protocol.UINT8_MASK
        data = bytes([transceiver_type & protocol.UINT8_MASK, power]) + bytes(protocol_mask) + bytes(3)
        return cls(command=InterfaceCommand.SET_MODE, data=data)

    def encode(self) -> bytes:
        msg = self.data.ljust(9, b"\x00")[:9]
        return InterfaceControlPacket(
            length=protocol.INTERFACE_CONTROL_LENGTH,
            packet_type=self.packet_type,
            sub_type=self.sub_type,
            seq_nbr=self.seq_nbr,
            command=self.command,
            msg1=msg[0],
            msg2=msg[1],
            msg3=msg[2],
            msg4=msg[3],
            msg5=msg[4],
            msg6=msg[5],
            msg7=msg[6],
            msg8=msg[7],
            msg9=msg[8],
        ).encode()


class InterfaceMessage(Message, frozen=True, kw_only=True):
    """Interface response from the transceiver."""

    packet_type: int = PacketType.INTERFACE_MESSAGE
    command: int = 0
    transceiver_type: int | None = None
    firmware_version: int | None = None
    hardware_version1: int | None = None
    hardware_version2: int | None = None
    protocols: bytes = b""
    text: str = ""

    @property
    def is_status_response(self) -> bool:
        return self.sub_type == InterfaceSubType.RESPONSE and self.command == InterfaceCommand.GET_STATUS

    @property
    def is_receiver_started(self) -> bool:
        return self.sub_type == InterfaceSubType.START_RECEIVER


class TransmitterMessage(Message, frozen=True, kw_only=True):
    """Transceiver acknowledgement of an outbound transmission."""

    packet_type: int = PacketType.TRANSMITTER_MESSAGE
    sub_type: int = protocol.TransmitterSubType.RESPONSE
    response: TransmitterResponse = TransmitterResponse.ACK

    @property
    def acknowledged(self) -> bool:
        return self.response in protocol.ACK_RESPONSES

    def encode(self) -> bytes:
        return TransmitterPacket(
            length=protocol.TRANSMITTER_MESSAGE_LENGTH,
            packet_type=self.packet_type,
            sub_type=self.sub_type,
            seq_nbr=self.seq_nbr,
            response=int(self.response),
        ).encode()


class DeviceMessage(Message, frozen=True, kw_only=True):
    """Device packet carried to listeners without interpretation."""

    data: bytes = b""

    @property
    def packet_name(self) -> str:
        try:
            return PacketType(self.packet_type).name
        except ValueError:
            return f"0x{self.packet_type:02X}"

    def encode(self) -> bytes:
        length = len(self.data) + protocol.MIN_MESSAGE_LENGTH
        if length > protocol.MAX_PACKET_LENGTH:
            raise ValueError(f"Device message too large ({length} bytes)")
        return DevicePacket(
            length=length,
            packet_type=self.packet_type,
            sub_type=self.sub_type,
            seq_nbr=self.seq_nbr,
            data=self.data,
        ).encode()


def _decode_interface(raw: bytes) -> InterfaceMessage:
    sub_type = raw[2]
    if sub_type == InterfaceSubType.RESPONSE and len(raw) >= 13:
        status = InterfaceStatusPacket.decode(raw)
        return InterfaceMessage(
            sub_type=status.sub_type,
            seq_nbr=status.seq_nbr,
            command=status.command,
            transceiver_type=status.transceiver_type,
            firmware_version=status.firmware_version,
            hardware_version1=status.hardware_version1,
            hardware_version2=status.hardware_version2,
            protocols=status.protocols,
        )

    notice = InterfaceNoticePacket.decode(raw)
    text = notice.data.decode("ascii", errors="ignore").strip("\x00 ")
    return InterfaceMessage(
        sub_type=notice.sub_type,
        seq_nbr=notice.seq_nbr,
        command=notice.command,
        text=text,
    )


def _decode_transmitter(raw: bytes) -> TransmitterMessage:
    packet = TransmitterPacket.decode(raw)
    try:
        response = TransmitterResponse(packet.response)
    except ValueError as exc:
        raise MessageDecodeError(f"Unknown transmitter response 0x{packet.response:02X}") from exc
    return TransmitterMessage(
        sub_type=packet.sub_type,
        seq_nbr=packet.seq_nbr,
        response=response,
    )


def decode(packet: bytes | bytearray | memoryview) -> Message:
    """Decode a complete frame (length byte included) into a typed message."""
    raw = bytes(packet)
    if len(raw) < protocol.HEADER_SIZE:
        raise MessageDecodeError(f"Packet too short ({len(raw)} bytes)")
    if raw[0] != len(raw) - 1:
        raise MessageDecodeError(f"Length byte {raw[0]} does not match packet size {len(raw) - 1}")

    try:
        packet_type = PacketType(raw[1])
    except ValueError as exc:
        raise MessageNotImplementedError(f"Packet type 0x{raw[1]:02X} is not supported") from exc

    try:
        if packet_type == PacketType.INTERFACE_MESSAGE:
            return _decode_interface(raw)
        if packet_type == PacketType.TRANSMITTER_MESSAGE:
            return _decode_transmitter(raw)
        if packet_type in DEVICE_PACKET_TYPES:
            device = DevicePacket.decode(raw)
            return DeviceMessage(
                packet_type=device.packet_type,
                sub_type=device.sub_type,
                seq_nbr=device.seq_nbr,
                data=device.data,
            )
    except ConstructError as exc:
        raise MessageDecodeError(f"Malformed {packet_type.name} packet: {exc}") from exc

    raise MessageNotImplementedError(f"Packet type {packet_type.name} is not supported")


def encode(message: Message) -> bytes:
    """Encode *message* into a complete frame ready for the transport."""
    return message.encode()
