"""Serial transport for RFXCOM transceivers attached as a tty (pyserial)."""

from __future__ import annotations

import errno
import logging
from typing import TYPE_CHECKING

import serial

from ..const import SERIAL_BAUDRATE, SERIAL_BYTESIZE, SERIAL_READ_TIMEOUT, SERIAL_STOPBITS
from ..errors import DeviceBusyError, NoSuchPortError, TransportConnectError, TransportIOError
from .base import ThreadedTransport

if TYPE_CHECKING:
    from ..config.settings import BridgeConfig

logger = logging.getLogger("rfxbridge.transport.serial")

_MISSING_PORT_ERRNOS = frozenset({errno.ENOENT, errno.ENODEV, errno.ENXIO})
_BUSY_ERRNOS = frozenset({errno.EBUSY, errno.EAGAIN})
_PERMISSION_ERRNOS = frozenset({errno.EACCES, errno.EPERM})


def _open_serial_device(port: str) -> serial.Serial:
    device = serial.serial_for_url(
        port,
        baudrate=SERIAL_BAUDRATE,
        bytesize=SERIAL_BYTESIZE,
        parity=serial.PARITY_NONE,
        stopbits=SERIAL_STOPBITS,
        timeout=SERIAL_READ_TIMEOUT,
        do_not_open=True,
    )
    device.exclusive = True
    device.open()
    return device


class SerialTransport(ThreadedTransport):
    """38400-8N1 link with DTR/RTS asserted and an exclusive port lock."""

    name = "serial"

    def __init__(self) -> None:
        super().__init__()
        self._device: serial.Serial | None = None

    def _open(self, config: BridgeConfig) -> str:
        port = config.serial_port
        if not port:
            raise TransportConnectError("No serial port configured")

        logger.debug("Opening serial port %s", port)
        try:
            device = _open_serial_device(port)
        except (serial.SerialException, OSError) as exc:
            code = getattr(exc, "errno", None)
            if code in _MISSING_PORT_ERRNOS:
                raise NoSuchPortError(f"Serial port {port} does not exist") from exc
            if code in _BUSY_ERRNOS:
                raise DeviceBusyError(f"Serial port {port} is in use") from exc
            if code in _PERMISSION_ERRNOS:
                raise TransportConnectError(
                    f"Permission denied opening serial port {port}; check the device group or udev rules"
                ) from exc
            raise TransportConnectError(f"Could not open serial port {port}: {exc}") from exc

        try:
            device.dtr = True
            device.rts = True
        except (serial.SerialException, OSError) as exc:
            device.close()
            raise TransportConnectError(f"Could not assert DTR/RTS on {port}: {exc}") from exc

        self._device = device
        return port

    def _close(self) -> None:
        device, self._device = self._device, None
        if device is not None:
            device.close()

    def _read_chunk(self) -> bytes:
        device = self._device
        if device is None:
            raise TransportIOError("Serial port closed")
        try:
            # Block for the first byte (bounded by the read timeout), then
            # drain whatever else is already buffered.
            data = device.read(1)
            if data:
                waiting = device.in_waiting
                if waiting:
                    data += device.read(waiting)
        except serial.SerialException as exc:
            raise TransportIOError(f"Serial read failed: {exc}") from exc
        return data

    def _write_raw(self, data: bytes) -> None:
        device = self._device
        if device is None:
            raise TransportIOError("Serial port closed")
        try:
            device.write(data)
            device.flush()
        except serial.SerialException as exc:
            raise TransportIOError(f"Serial write failed: {exc}") from exc
