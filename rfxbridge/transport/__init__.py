"""Link implementations for the RFXCOM transceiver."""

from __future__ import annotations

from ..config.settings import TRANSPORT_FTDI, TRANSPORT_SERIAL, TRANSPORT_TCP
from ..errors import TransportUnavailableError
from .base import PacketSink, ThreadedTransport, Transport
from .ftdi import FtdiTransport
from .serial import SerialTransport
from .tcp import TcpTransport

_TRANSPORTS: dict[str, type[Transport]] = {
    TRANSPORT_SERIAL: SerialTransport,
    TRANSPORT_FTDI: FtdiTransport,
    TRANSPORT_TCP: TcpTransport,
}


def create_transport(kind: str | None) -> Transport:
    """Instantiate the transport for *kind* (see ``BridgeConfig.transport_kind``)."""
    if kind is None:
        raise TransportUnavailableError("No serial port, bridge id or host configured")
    try:
        return _TRANSPORTS[kind]()
    except KeyError:
        raise TransportUnavailableError(f"Unknown transport {kind!r}") from None


__all__ = [
    "FtdiTransport",
    "PacketSink",
    "SerialTransport",
    "TcpTransport",
    "ThreadedTransport",
    "Transport",
    "create_transport",
]
