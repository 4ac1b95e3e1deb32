"""Length-prefixed framing for the RFXCOM serial/TCP link.

Every frame on the wire is ``[len:u8][payload: len bytes]``. There is no
checksum and no delimiter: the only synchronisation point is the length byte,
so the framer keeps a partially received payload across reads and only emits
a packet once exactly ``len`` bytes have arrived.

A zero length byte is never produced by the transceiver; it is treated as a
stream glitch and skipped.
"""

from __future__ import annotations

import logging

import msgspec

from . import protocol

logger = logging.getLogger("rfxbridge.protocol.frame")


class Packet(msgspec.Struct, frozen=True):
    """A complete frame as received from the transceiver."""

    payload: bytes

    @property
    def length(self) -> int:
        return len(self.payload)

    @property
    def raw(self) -> bytes:
        """The frame as it appeared on the wire, length byte included."""
        return bytes([len(self.payload)]) + self.payload


def frame(payload: bytes) -> bytes:
    """Prefix *payload* with its length byte."""
    payload_len = len(payload)
    if not 1 <= payload_len <= protocol.MAX_PACKET_LENGTH:
        raise ValueError(f"Payload length {payload_len} outside 1..{protocol.MAX_PACKET_LENGTH}")
    return bytes([payload_len]) + bytes(payload)


class PacketFramer:
    """Incremental frame splitter fed with arbitrary chunks of the byte stream."""

    def __init__(self) -> None:
        self._expected: int | None = None
        self._buffer = bytearray()

    @property
    def pending(self) -> int:
        """Number of payload bytes held for an incomplete frame."""
        return len(self._buffer)

    def reset(self) -> None:
        self._expected = None
        self._buffer.clear()

    def feed(self, data: bytes | bytearray | memoryview) -> list[Packet]:
        packets: list[Packet] = []
        view = memoryview(data)
        index = 0
        total = len(view)

        while index < total:
            if self._expected is None:
                length = view[index]
                index += 1
                if length == 0:
                    logger.debug("Discarding zero length byte in stream")
                    continue
                self._expected = length
                self._buffer.clear()
                continue

            missing = self._expected - len(self._buffer)
            chunk = view[index : index + missing]
            self._buffer.extend(chunk)
            index += len(chunk)

            if len(self._buffer) == self._expected:
                packets.append(Packet(payload=bytes(self._buffer)))
                self._expected = None
                self._buffer.clear()

        return packets
