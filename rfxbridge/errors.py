"""Exception hierarchy for the RFXCOM bridge."""

from __future__ import annotations


class RFXComError(Exception):
    """Base error for rfxbridge."""


class ConfigurationError(RFXComError):
    """Raised when bridge configuration is missing or malformed."""


class TransportError(RFXComError):
    """Base transport error."""


class TransportUnavailableError(TransportError):
    """Raised when no transport selector is configured."""


class TransportConnectError(TransportError):
    """Raised when opening the link to the transceiver fails."""


class NoSuchPortError(TransportConnectError):
    """Raised when the configured serial port does not exist."""


class DeviceBusyError(TransportConnectError):
    """Raised when the device is claimed by another driver or process."""

    def __init__(self, message: str, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint = hint

    def __str__(self) -> str:
        base = super().__str__()
        if self.hint:
            return f"{base}. {self.hint}"
        return base


class TransportIOError(TransportError):
    """Raised on read/write failures of an open link."""


class NativeLinkError(TransportError):
    """Raised when a native driver library cannot be loaded."""


class MessageDecodeError(RFXComError):
    """Raised when a packet cannot be decoded."""


class MessageNotImplementedError(RFXComError):
    """Raised for packet types the codec does not support."""


class SendFailedError(RFXComError):
    """Raised when an outbound message could not be written."""


class ResponseTimeoutError(RFXComError):
    """Raised when the transceiver does not acknowledge a transmission."""


__all__ = [
    "RFXComError",
    "ConfigurationError",
    "TransportError",
    "TransportUnavailableError",
    "TransportConnectError",
    "NoSuchPortError",
    "DeviceBusyError",
    "TransportIOError",
    "NativeLinkError",
    "MessageDecodeError",
    "MessageNotImplementedError",
    "SendFailedError",
    "ResponseTimeoutError",
]
