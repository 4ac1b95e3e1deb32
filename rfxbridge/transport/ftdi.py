"""USB transport using the FTDI D2XX driver (``ftd2xx``).

Discovered bridges are addressed by their FTDI serial number. The D2XX
shared library is loaded lazily on the first connect so hosts without it can
still use the serial and TCP transports.
"""

from __future__ import annotations

import logging
import platform
from types import ModuleType
from typing import TYPE_CHECKING, Any

from ..const import FTDI_NOT_OPENED_HINT, FTDI_READ_TIMEOUT_MS, FTDI_WRITE_TIMEOUT_MS, SERIAL_BAUDRATE
from ..errors import DeviceBusyError, NativeLinkError, NoSuchPortError, TransportConnectError, TransportIOError
from .base import ThreadedTransport

if TYPE_CHECKING:
    from ..config.settings import BridgeConfig

logger = logging.getLogger("rfxbridge.transport.ftdi")

_DEVICE_NOT_OPENED = "DEVICE_NOT_OPENED"
_DEVICE_NOT_FOUND = "DEVICE_NOT_FOUND"


def _load_driver() -> ModuleType:
    """Import ``ftd2xx``; it loads the native D2XX library at import time."""
    try:
        import ftd2xx
    except (ImportError, OSError) as exc:
        raise NativeLinkError(
            f"FTDI D2XX library unavailable on {platform.system()} {platform.release()} "
            f"({platform.machine()}): {exc}"
        ) from exc
    return ftd2xx


class FtdiTransport(ThreadedTransport):
    """Link to an RFXCOM bridge opened by FTDI serial number."""

    name = "ftdi"

    def __init__(self) -> None:
        super().__init__()
        self._driver: Any = None
        self._device: Any = None

    def _open(self, config: BridgeConfig) -> str:
        bridge_id = config.bridge_id
        if not bridge_id:
            raise TransportConnectError("No FTDI bridge id configured")

        driver = _load_driver()
        logger.debug("Opening FTDI device %s", bridge_id)
        try:
            device = driver.openEx(bridge_id.encode("ascii"), driver.defines.OPEN_BY_SERIAL_NUMBER)
        except driver.DeviceError as exc:
            reason = str(exc)
            if _DEVICE_NOT_OPENED in reason:
                raise DeviceBusyError(f"FTDI device {bridge_id} could not be opened", FTDI_NOT_OPENED_HINT) from exc
            if _DEVICE_NOT_FOUND in reason:
                raise NoSuchPortError(f"FTDI device {bridge_id} not found") from exc
            raise TransportConnectError(f"Could not open FTDI device {bridge_id}: {reason}") from exc

        try:
            device.setBaudRate(SERIAL_BAUDRATE)
            device.setDataCharacteristics(
                driver.defines.BITS_8,
                driver.defines.STOP_BITS_1,
                driver.defines.PARITY_NONE,
            )
            device.setTimeouts(FTDI_READ_TIMEOUT_MS, FTDI_WRITE_TIMEOUT_MS)
            device.setDtr()
            device.setRts()
        except driver.DeviceError as exc:
            device.close()
            raise TransportConnectError(f"Could not configure FTDI device {bridge_id}: {exc}") from exc

        self._driver = driver
        self._device = device
        return bridge_id

    def _close(self) -> None:
        device, self._device = self._device, None
        if device is not None:
            device.close()

    def _read_chunk(self) -> bytes:
        device = self._device
        if device is None:
            raise TransportIOError("FTDI device closed")
        try:
            # read() honours the device read timeout and may return short.
            waiting = device.getQueueStatus()
            return bytes(device.read(max(1, waiting)))
        except self._driver.DeviceError as exc:
            raise TransportIOError(f"FTDI read failed: {exc}") from exc

    def _write_raw(self, data: bytes) -> None:
        device = self._device
        if device is None:
            raise TransportIOError("FTDI device closed")
        try:
            written = device.write(data)
        except self._driver.DeviceError as exc:
            raise TransportIOError(f"FTDI write failed: {exc}") from exc
        if written != len(data):
            raise TransportIOError(f"FTDI short write ({written}/{len(data)} bytes)")
