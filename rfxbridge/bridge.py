"""Public facade of the RFXCOM bridge controller.

:class:`RFXComBridge` owns one transceiver link. Callers transmit with
:meth:`RFXComBridge.send`, which blocks until the transceiver acknowledges
the sequence number stamped on the message; inbound device messages are
delivered to registered listeners on the transport's reader thread.

Example::

    bridge = RFXComBridge(load_bridge_config({"serialPort": "/dev/ttyUSB0"}))
    bridge.register(lambda source_id, message: print(source_id, message))
    bridge.start()
    ...
    bridge.stop()
"""

from __future__ import annotations

import logging
import threading
from typing import Any

import msgspec

from .config.settings import BridgeConfig
from .errors import ResponseTimeoutError, SendFailedError, TransportError
from .protocol.messages import Message
from .protocol.protocol import ACK_RESPONSES, TransmitterResponse
from .services.connection import ConnectionManager, StatusCallback, TransportFactory
from .services.correlator import SequenceCorrelator
from .services.listeners import Listener, ListenerRegistry
from .services.supervisor import LinkSupervisor
from .state import BridgeStats, BridgeStatus, StatusDetail, TransceiverInfo
from .transport import create_transport
from .util import log_hexdump

logger = logging.getLogger("rfxbridge.bridge")

__all__ = ["RFXComBridge", "SendResult"]


class SendResult(msgspec.Struct, frozen=True):
    """Outcome of an acknowledged transmission."""

    seq: int
    response: TransmitterResponse
    warning: bool = False


class RFXComBridge:
    """Bridge controller for one RFXCOM transceiver."""

    def __init__(
        self,
        config: BridgeConfig,
        *,
        transport_factory: TransportFactory = create_transport,
        status_callback: StatusCallback | None = None,
    ) -> None:
        self._config = config
        self._stats = BridgeStats()
        self._correlator = SequenceCorrelator(self._stats)
        self._registry = ListenerRegistry(self._stats)
        self._connection = ConnectionManager(
            config,
            correlator=self._correlator,
            registry=self._registry,
            stats=self._stats,
            transport_factory=transport_factory,
            status_callback=status_callback,
        )
        self._supervisor: LinkSupervisor | None = None
        self._send_lock = threading.Lock()
        self._lifecycle_lock = threading.Lock()

    # ------------------------------------------------------------------
    # Lifecycle

    def start(self) -> None:
        """Start supervising the link; the first connection attempt is immediate."""
        with self._lifecycle_lock:
            if self._supervisor is not None:
                return
            logger.info("Starting RFXCOM bridge %s (%s)", self._config.uid, self._config.endpoint)
            self._connection.start()
            self._supervisor = LinkSupervisor(
                self._connection.tick,
                lambda: self._connection.link_running,
                self._config.check_interval,
            )
            self._supervisor.start()

    def stop(self) -> None:
        """Stop the bridge. Calling it again is a no-op."""
        with self._lifecycle_lock:
            supervisor, self._supervisor = self._supervisor, None
            self._registry.clear()
            if supervisor is None and self._connection.transport is None:
                return
            logger.info("Stopping RFXCOM bridge %s", self._config.uid)
            # Interrupts a pending reset delay before waiting for the supervisor.
            self._connection.request_stop()
            if supervisor is not None:
                supervisor.cancel()
            self._connection.stop()

    shutdown = stop

    def __enter__(self) -> RFXComBridge:
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()

    # ------------------------------------------------------------------
    # Outbound

    def send(self, message: Message) -> SendResult:
        """Transmit *message* and wait for the transceiver's acknowledgement.

        Raises :class:`SendFailedError` when the frame cannot be written and
        :class:`ResponseTimeoutError` when no acknowledgement arrives; both
        take the bridge offline until the supervisor reconnects. NAK
        responses are returned with ``warning`` set.
        """
        with self._send_lock:
            seq = self._correlator.next_seq()
            stamped = message.with_seq(seq)
            data = stamped.encode()

            logger.debug("Transmitting message '%s'", stamped)
            log_hexdump(logger, logging.DEBUG, "Transmitting data", data)

            self._correlator.clear()
            try:
                self._connection.write(data)
            except TransportError as exc:
                self._stats.send_failures += 1
                self._connection.mark_offline(StatusDetail.COMMUNICATION_ERROR, exc)
                raise SendFailedError(f"Send failed, reason: {exc}") from exc
            self._stats.messages_sent += 1

            timeout = self._config.response_timeout
            response = self._correlator.await_response(timeout)
            if response is None:
                self._stats.timeouts += 1
                logger.warning("No response received from transceiver (seq %d)", seq)
                self._connection.mark_offline(
                    StatusDetail.COMMUNICATION_ERROR,
                    f"no acknowledgement within {timeout:.1f}s",
                )
                raise ResponseTimeoutError(f"No acknowledge received from RFXCOM transceiver within {timeout:.1f}s")

            if response.response in ACK_RESPONSES:
                self._stats.acks += 1
                logger.debug("Command successfully transmitted, '%s' received", response.response.name)
                return SendResult(seq=seq, response=response.response)

            self._stats.naks += 1
            logger.warning("Transceiver rejected transmission %d: %s", seq, response.response.name)
            return SendResult(seq=seq, response=response.response, warning=True)

    # ------------------------------------------------------------------
    # Listeners

    def register(self, listener: Listener) -> bool:
        if listener is None:
            raise ValueError("It's not allowed to pass a null listener")
        return self._registry.register(listener)

    def unregister(self, listener: Listener) -> bool:
        if listener is None:
            raise ValueError("It's not allowed to pass a null listener")
        return self._registry.unregister(listener)

    subscribe = register
    unsubscribe = unregister

    # ------------------------------------------------------------------
    # Introspection

    def status(self) -> BridgeStatus:
        return self._connection.status

    def configuration(self) -> BridgeConfig:
        return self._config

    @property
    def state(self) -> str:
        return self._connection.fsm_state

    @property
    def transceiver(self) -> TransceiverInfo | None:
        return self._connection.transceiver

    @property
    def stats(self) -> BridgeStats:
        return self._stats

    def snapshot(self) -> dict[str, Any]:
        transport = self._connection.transport
        transceiver = self._connection.transceiver
        return {
            "state": self._connection.fsm_state,
            "status": self._connection.status.as_dict(),
            "transport": {
                "kind": self._config.transport_kind,
                "endpoint": self._config.endpoint,
                "connected": bool(transport is not None and transport.connected),
            },
            "transceiver": transceiver.as_dict() if transceiver is not None else None,
            "listeners": len(self._registry),
            "stats": self._stats.as_dict(),
        }

    def handle_command(self, channel: str, command: object) -> None:
        """Commands addressed to the bridge itself are not supported."""
        logger.debug("Bridge commands are not supported (channel %s, command %r)", channel, command)

