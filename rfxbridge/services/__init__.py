"""Bridge services: sequencing, listeners, connection and supervision."""

from .connection import ConnectionManager
from .correlator import SequenceCorrelator
from .listeners import DeviceMessageListener, Listener, ListenerRegistry
from .supervisor import LinkSupervisor

__all__ = [
    "ConnectionManager",
    "DeviceMessageListener",
    "LinkSupervisor",
    "Listener",
    "ListenerRegistry",
    "SequenceCorrelator",
]
