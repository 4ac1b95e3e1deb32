"""Transport capability shared by the serial, FTDI and TCP links.

A transport owns one open link and one inbound reader thread. The reader
feeds raw chunks through a :class:`PacketFramer` and hands every complete
frame (length byte included) to the subscribed :class:`PacketSink`. Read or
write failures are reported once through ``error_occurred``; a deliberate
``disconnect()`` never reports an error.
"""

from __future__ import annotations

import abc
import logging
import threading
from typing import TYPE_CHECKING, Protocol

from ..const import READER_JOIN_TIMEOUT
from ..errors import TransportError, TransportIOError
from ..protocol.frame import PacketFramer
from ..util import log_hexdump

if TYPE_CHECKING:
    from ..config.settings import BridgeConfig

logger = logging.getLogger("rfxbridge.transport")


class PacketSink(Protocol):
    """Receiver of inbound frames and link failures."""

    def packet_received(self, packet: bytes) -> None: ...

    def error_occurred(self, exc: TransportError) -> None: ...


class Transport(abc.ABC):
    """Capability every link variant implements."""

    name: str = "transport"

    @abc.abstractmethod
    def connect(self, config: BridgeConfig) -> None:
        """Open the link; raise a :class:`TransportError` subclass on failure."""

    @abc.abstractmethod
    def disconnect(self) -> None:
        """Close the link. Safe to call repeatedly and from any thread."""

    @abc.abstractmethod
    def write(self, data: bytes) -> None:
        """Write a complete frame; raise :class:`TransportIOError` on failure."""

    @abc.abstractmethod
    def subscribe(self, sink: PacketSink | None) -> None:
        """Install the single packet sink, replacing any previous one."""

    @property
    @abc.abstractmethod
    def connected(self) -> bool: ...


class ThreadedTransport(Transport):
    """Transport base running a blocking reader loop on its own thread.

    Subclasses implement the four link primitives. ``_read_chunk`` must return
    ``b""`` when its read timeout expires so the loop can observe shutdown.
    """

    def __init__(self) -> None:
        self._sink: PacketSink | None = None
        self._framer = PacketFramer()
        self._reader: threading.Thread | None = None
        self._closing = threading.Event()
        self._lock = threading.RLock()
        self._is_open = False
        self._endpoint: str | None = None

    @abc.abstractmethod
    def _open(self, config: BridgeConfig) -> str:
        """Open the link and return a printable endpoint description."""

    @abc.abstractmethod
    def _close(self) -> None: ...

    @abc.abstractmethod
    def _read_chunk(self) -> bytes: ...

    @abc.abstractmethod
    def _write_raw(self, data: bytes) -> None: ...

    @property
    def connected(self) -> bool:
        return self._is_open

    @property
    def endpoint(self) -> str | None:
        return self._endpoint

    def subscribe(self, sink: PacketSink | None) -> None:
        self._sink = sink

    def connect(self, config: BridgeConfig) -> None:
        with self._lock:
            if self._is_open:
                return
            self._closing.clear()
            self._framer.reset()
            self._endpoint = self._open(config)
            self._is_open = True
            self._reader = threading.Thread(
                target=self._read_loop,
                name=f"rfxbridge-{self.name}-reader",
                daemon=True,
            )
            self._reader.start()
        logger.info("%s link open: %s", self.name, self._endpoint)

    def disconnect(self) -> None:
        with self._lock:
            if not self._is_open:
                return
            self._closing.set()
            self._is_open = False
            reader = self._reader
            self._reader = None
            try:
                self._close()
            except (OSError, TransportError) as exc:
                logger.debug("Error while closing %s link: %s", self.name, exc)

        if reader is not None and reader is not threading.current_thread():
            reader.join(READER_JOIN_TIMEOUT)
            if reader.is_alive():
                logger.warning("%s reader thread did not stop within %.1fs", self.name, READER_JOIN_TIMEOUT)
        logger.info("%s link closed: %s", self.name, self._endpoint)

    def write(self, data: bytes) -> None:
        if not self._is_open:
            raise TransportIOError(f"{self.name} link is not open")
        log_hexdump(logger, logging.DEBUG, "TX", data)
        try:
            self._write_raw(bytes(data))
        except TransportIOError:
            raise
        except OSError as exc:
            raise TransportIOError(f"{self.name} write failed: {exc}") from exc

    def _read_loop(self) -> None:
        while not self._closing.is_set():
            try:
                chunk = self._read_chunk()
            except (OSError, TransportError) as exc:
                self._report(exc)
                return
            if not chunk:
                continue
            for packet in self._framer.feed(chunk):
                raw = packet.raw
                log_hexdump(logger, logging.DEBUG, "RX", raw)
                sink = self._sink
                if sink is not None:
                    sink.packet_received(raw)

    def _report(self, exc: BaseException) -> None:
        if self._closing.is_set():
            logger.debug("%s reader stopped: %s", self.name, exc)
            return
        if self._framer.pending:
            logger.warning("%s link lost with %d bytes of an incomplete frame", self.name, self._framer.pending)
            self._framer.reset()
        error = exc if isinstance(exc, TransportIOError) else TransportIOError(f"{self.name} read failed: {exc}")
        if error is not exc:
            error.__cause__ = exc
        logger.error("%s link error: %s", self.name, error)
        sink = self._sink
        if sink is not None:
            sink.error_occurred(error)
