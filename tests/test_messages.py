"""Tests for the RFXCOM message codec and control frames."""

from __future__ import annotations

import pytest
from rfxbridge.errors import MessageDecodeError, MessageNotImplementedError
from rfxbridge.protocol import messages, protocol
from rfxbridge.protocol.messages import (
    DeviceMessage,
    InterfaceControlMessage,
    InterfaceMessage,
    Message,
    TransmitterMessage,
)
from rfxbridge.protocol.protocol import PacketType, TransmitterResponse

from tests.mocks import lighting2_packet, receiver_started, status_response, transmitter_ack


def test_control_frames_match_protocol() -> None:
    assert protocol.CMD_RESET == bytes.fromhex("0D00000000000000000000000000")
    assert protocol.CMD_GET_STATUS == bytes.fromhex("0D00000102000000000000000000")
    assert protocol.CMD_START_RECEIVER == bytes.fromhex("0D00000307000000000000000000")
    for command in (protocol.CMD_RESET, protocol.CMD_GET_STATUS, protocol.CMD_START_RECEIVER):
        assert len(command) == 14


def test_decode_status_response() -> None:
    message = messages.decode(status_response(0x53))
    assert isinstance(message, InterfaceMessage)
    assert message.is_status_response
    assert not message.is_receiver_started
    assert message.transceiver_type == 0x53
    assert message.firmware_version == 0x9A
    assert (message.hardware_version1, message.hardware_version2) == (1, 3)
    assert message.protocols == b"\x00\x00\x27\x00"


def test_decode_receiver_started() -> None:
    message = messages.decode(receiver_started())
    assert isinstance(message, InterfaceMessage)
    assert message.is_receiver_started
    assert message.text == "Copyright RFXCOM"


def test_decode_transmitter_ack() -> None:
    message = messages.decode(transmitter_ack(7, TransmitterResponse.ACK_DELAYED))
    assert isinstance(message, TransmitterMessage)
    assert message.seq_nbr == 7
    assert message.response is TransmitterResponse.ACK_DELAYED
    assert message.acknowledged


@pytest.mark.parametrize("response", [TransmitterResponse.NAK, TransmitterResponse.NAK_INVALID_AC_ADDRESS])
def test_nak_is_not_acknowledged(response: TransmitterResponse) -> None:
    message = messages.decode(transmitter_ack(1, response))
    assert isinstance(message, TransmitterMessage)
    assert not message.acknowledged


def test_decode_device_message_is_opaque() -> None:
    message = messages.decode(lighting2_packet(seq=9))
    assert isinstance(message, DeviceMessage)
    assert message.packet_type == PacketType.LIGHTING2
    assert message.packet_name == "LIGHTING2"
    assert message.seq_nbr == 9
    assert message.data == bytes.fromhex("0123456701010F50")


def test_device_message_encode_restores_wire_bytes() -> None:
    raw = lighting2_packet(seq=4)
    message = messages.decode(raw)
    assert messages.encode(message) == raw


def test_unknown_packet_type_is_not_implemented() -> None:
    with pytest.raises(MessageNotImplementedError):
        messages.decode(bytes([0x04, 0xEE, 0x00, 0x00, 0x00]))


def test_known_but_unsupported_type_is_not_implemented() -> None:
    with pytest.raises(MessageNotImplementedError):
        messages.decode(bytes([0x04, PacketType.INTERFACE_CONTROL, 0x00, 0x00, 0x00]))


@pytest.mark.parametrize(
    "raw",
    [
        b"\x02\x01\x00",  # shorter than the header
        b"\x09\x11\x00\x00\x01",  # length byte disagrees with size
    ],
)
def test_malformed_packets_raise_decode_error(raw: bytes) -> None:
    with pytest.raises(MessageDecodeError):
        messages.decode(raw)


def test_unknown_transmitter_response_is_decode_error() -> None:
    with pytest.raises(MessageDecodeError):
        messages.decode(transmitter_ack(1, 0x09))


def test_set_mode_layout() -> None:
    message = InterfaceControlMessage.set_mode(
        0x53,
        protocol_mask=bytes([0x80, 0x00, 0x27, 0x01]),
        transmit_power=10,
    ).with_seq(2)
    assert message.encode() == bytes([0x0D, 0x00, 0x00, 0x02, 0x03, 0x53, 28, 0x80, 0x00, 0x27, 0x01, 0, 0, 0])


def test_set_mode_rejects_bad_mask() -> None:
    with pytest.raises(ValueError):
        InterfaceControlMessage.set_mode(0x53, protocol_mask=b"\x00")


def test_with_seq_wraps_to_one_byte() -> None:
    message = DeviceMessage(packet_type=PacketType.LIGHTING2, data=bytes(8))
    assert message.with_seq(0x1FF).seq_nbr == 0xFF
    assert message.seq_nbr == 0


def test_base_message_cannot_be_encoded() -> None:
    with pytest.raises(MessageNotImplementedError):
        Message(packet_type=PacketType.INTERFACE_MESSAGE).encode()
