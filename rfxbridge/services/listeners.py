"""Device message listener registry."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Protocol, Union, runtime_checkable

from ..protocol.messages import Message
from ..state import BridgeStats

logger = logging.getLogger("rfxbridge.listeners")


@runtime_checkable
class DeviceMessageListener(Protocol):
    def on_device_message(self, source_id: str, message: Message) -> None: ...


Listener = Union[DeviceMessageListener, Callable[[str, Message], None]]


class ListenerRegistry:
    """Ordered, duplicate-free set of listeners.

    Writers replace the stored tuple under a lock; ``dispatch`` iterates the
    tuple it read at entry, so registrations made during a dispatch take
    effect from the next message on.
    """

    def __init__(self, stats: BridgeStats | None = None) -> None:
        self._lock = threading.Lock()
        self._listeners: tuple[Listener, ...] = ()
        self._stats = stats

    def __len__(self) -> int:
        return len(self._listeners)

    def __contains__(self, listener: object) -> bool:
        return listener in self._listeners

    def snapshot(self) -> tuple[Listener, ...]:
        return self._listeners

    def register(self, listener: Listener) -> bool:
        with self._lock:
            if listener in self._listeners:
                return False
            self._listeners = self._listeners + (listener,)
        logger.debug("Registered listener %r", listener)
        return True

    def unregister(self, listener: Listener) -> bool:
        with self._lock:
            if listener not in self._listeners:
                return False
            self._listeners = tuple(item for item in self._listeners if item != listener)
        logger.debug("Unregistered listener %r", listener)
        return True

    def clear(self) -> None:
        with self._lock:
            self._listeners = ()

    def dispatch(self, source_id: str, message: Message) -> int:
        """Deliver *message* to every listener; return how many succeeded."""
        delivered = 0
        for listener in self._listeners:
            try:
                if isinstance(listener, DeviceMessageListener):
                    listener.on_device_message(source_id, message)
                else:
                    listener(source_id, message)
            except Exception:
                logger.exception("Listener %r failed while handling %s", listener, type(message).__name__)
                if self._stats is not None:
                    self._stats.listener_errors += 1
                continue
            delivered += 1
        return delivered
