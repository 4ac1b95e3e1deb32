"""Defaults shared across the RFXCOM bridge packages."""

from __future__ import annotations

from typing import Final

# Transceiver line settings (fixed by the RFXCOM hardware).
SERIAL_BAUDRATE: Final[int] = 38400
SERIAL_BYTESIZE: Final[int] = 8
SERIAL_STOPBITS: Final[int] = 1
SERIAL_READ_TIMEOUT: Final[float] = 0.5

DEFAULT_TCP_PORT: Final[int] = 10001
DEFAULT_CONNECT_TIMEOUT: Final[float] = 10.0
TCP_READ_TIMEOUT: Final[float] = 0.5

FTDI_READ_TIMEOUT_MS: Final[int] = 500
FTDI_WRITE_TIMEOUT_MS: Final[int] = 1000

DEFAULT_RESPONSE_TIMEOUT: Final[float] = 5.0
DEFAULT_RESET_DELAY: Final[float] = 0.3
DEFAULT_CHECK_INTERVAL: Final[float] = 60.0
READER_JOIN_TIMEOUT: Final[float] = 2.0

DEFAULT_TRANSMIT_POWER: Final[int] = -18
MIN_TRANSMIT_POWER: Final[int] = -18
MAX_TRANSMIT_POWER: Final[int] = 13

DEFAULT_BRIDGE_UID: Final[str] = "rfxcom:bridge"

SET_MODE_LENGTH: Final[int] = 14

FTDI_NOT_OPENED_HINT: Final[str] = (
    "Automatically discovered RFXCOM bridges use the FTDI chip driver (D2XX). "
    "This error is normally caused by the operating system's native FTDI "
    "driver, which prevents D2XX from opening the device. Uninstall the native "
    "FTDI driver or configure the bridge with serial_port instead, which uses "
    "the regular serial port driver rather than D2XX."
)
