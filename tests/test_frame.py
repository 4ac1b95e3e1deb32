"""Tests for the length-prefixed packet framer."""

from __future__ import annotations

import pytest
from rfxbridge.protocol.frame import Packet, PacketFramer, frame


def test_frame_prefixes_length() -> None:
    assert frame(b"\x01\x02\x03") == b"\x03\x01\x02\x03"


@pytest.mark.parametrize("size", [0, 256])
def test_frame_rejects_out_of_range_payloads(size: int) -> None:
    with pytest.raises(ValueError):
        frame(bytes(size))


@pytest.mark.parametrize("size", [1, 2, 13, 255])
def test_single_packet_parses_back(size: int) -> None:
    payload = bytes((i * 7) & 0xFF for i in range(size))
    packets = PacketFramer().feed(frame(payload))
    assert packets == [Packet(payload=payload)]


def test_split_at_every_boundary_yields_one_packet() -> None:
    payload = bytes(range(1, 21))
    wire = frame(payload)
    for cut in range(len(wire) + 1):
        framer = PacketFramer()
        packets = framer.feed(wire[:cut]) + framer.feed(wire[cut:])
        assert [p.payload for p in packets] == [payload], f"split at {cut}"
        assert framer.pending == 0


def test_byte_by_byte_feed() -> None:
    framer = PacketFramer()
    packets = []
    for byte in frame(b"\xAA\xBB\xCC") + frame(b"\x01"):
        packets.extend(framer.feed(bytes([byte])))
    assert [p.payload for p in packets] == [b"\xAA\xBB\xCC", b"\x01"]


def test_zero_length_bytes_are_skipped() -> None:
    framer = PacketFramer()
    packets = framer.feed(b"\x00\x00\x02\x10\x20\x00\x01\x30")
    assert [p.payload for p in packets] == [b"\x10\x20", b"\x30"]


def test_partial_packet_is_held_until_complete() -> None:
    framer = PacketFramer()
    assert framer.feed(b"\x04\x01\x02") == []
    assert framer.pending == 2
    assert framer.feed(b"\x03") == []
    packets = framer.feed(b"\x04\x02\x07")
    assert [p.payload for p in packets] == [b"\x01\x02\x03\x04"]
    assert framer.feed(b"") == []
    assert framer.pending == 1


def test_reset_drops_partial_packet() -> None:
    framer = PacketFramer()
    framer.feed(b"\x05\x01\x02")
    framer.reset()
    assert framer.pending == 0
    assert [p.payload for p in framer.feed(b"\x01\x09")] == [b"\x09"]


def test_packet_raw_includes_length_byte() -> None:
    packet = Packet(payload=b"\x02\x01\x00\x05\x00")
    assert packet.length == 5
    assert packet.raw == b"\x05\x02\x01\x00\x05\x00"
