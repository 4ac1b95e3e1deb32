"""TCP transport for network-attached RFXCOM transceivers."""

from __future__ import annotations

import logging
import socket
from typing import TYPE_CHECKING

from ..const import TCP_READ_TIMEOUT
from ..errors import TransportConnectError, TransportIOError
from .base import ThreadedTransport

if TYPE_CHECKING:
    from ..config.settings import BridgeConfig

logger = logging.getLogger("rfxbridge.transport.tcp")

READ_CHUNK_SIZE = 1024


class TcpTransport(ThreadedTransport):
    """Plain TCP socket with Nagle disabled.

    Keepalive is not enabled; stalled links are detected by the supervisor.
    """

    name = "tcp"

    def __init__(self) -> None:
        super().__init__()
        self._sock: socket.socket | None = None

    def _open(self, config: BridgeConfig) -> str:
        if not config.host:
            raise TransportConnectError("No host configured")
        endpoint = f"{config.host}:{config.port}"
        logger.debug("Connecting to %s", endpoint)
        try:
            sock = socket.create_connection((config.host, config.port), timeout=config.connect_timeout)
        except OSError as exc:
            raise TransportConnectError(f"Could not connect to {endpoint}: {exc}") from exc

        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
        sock.settimeout(TCP_READ_TIMEOUT)
        self._sock = sock
        return endpoint

    def _close(self) -> None:
        sock, self._sock = self._sock, None
        if sock is None:
            return
        try:
            sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            # Peer already gone.
            pass
        sock.close()

    def _read_chunk(self) -> bytes:
        sock = self._sock
        if sock is None:
            raise TransportIOError("Socket closed")
        try:
            data = sock.recv(READ_CHUNK_SIZE)
        except socket.timeout:
            return b""
        if not data:
            raise TransportIOError("Connection closed by peer")
        return data

    def _write_raw(self, data: bytes) -> None:
        sock = self._sock
        if sock is None:
            raise TransportIOError("Socket closed")
        sock.sendall(data)
