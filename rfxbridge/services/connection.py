"""Connection state machine for the RFXCOM transceiver link.

The manager walks a freshly opened link through reset, status query and mode
configuration until the receiver reports it has started::

    offline -> connecting -> reset_sent -> status_requested
            -> configured -> running

Any transport failure passes through ``failed`` back to ``offline``; the
supervisor calls :meth:`ConnectionManager.tick` to try again.
"""

from __future__ import annotations

import logging
import platform
import threading
import time
from collections.abc import Callable
from typing import TYPE_CHECKING

from transitions import Machine

from ..config.settings import BridgeConfig
from ..const import SET_MODE_LENGTH
from ..errors import (
    MessageDecodeError,
    MessageNotImplementedError,
    NativeLinkError,
    TransportError,
    TransportIOError,
    TransportUnavailableError,
)
from ..protocol import messages
from ..protocol.messages import DeviceMessage, InterfaceControlMessage, InterfaceMessage, TransmitterMessage
from ..protocol.protocol import CMD_GET_STATUS, CMD_RESET, CMD_START_RECEIVER
from ..state import OFFLINE, ONLINE, BridgeStats, BridgeStatus, StatusDetail, TransceiverInfo
from ..transport import Transport, create_transport
from ..util import log_hexdump
from .correlator import SequenceCorrelator
from .listeners import ListenerRegistry

logger = logging.getLogger("rfxbridge.connection")

TransportFactory = Callable[[str | None], Transport]
StatusCallback = Callable[[BridgeStatus], None]

SET_MODE_SEQ = 0x02


def parse_set_mode(literal: str | None) -> bytes | None:
    """Return the 14-byte SET_MODE frame in *literal*, or None if unusable."""
    if not literal:
        return None
    try:
        data = bytes.fromhex(literal)
    except ValueError:
        logger.warning("Failed to parse setMode data %r; using the synthesized mode", literal)
        return None
    if len(data) != SET_MODE_LENGTH:
        logger.warning(
            "Invalid RFXCOM transceiver mode configuration (%d bytes, expected %d); using the synthesized mode",
            len(data),
            SET_MODE_LENGTH,
        )
        return None
    return data


class ConnectionManager:
    """Drives one transport from offline to a running receiver."""

    if TYPE_CHECKING:
        # FSM generated methods and attributes for static analysis
        fsm_state: str
        begin_connect: Callable[[], None]
        connected: Callable[[], None]
        request_status: Callable[[], None]
        status_received: Callable[[], None]
        receiver_started: Callable[[], None]
        fail: Callable[[], None]
        settle: Callable[[], None]
        shutdown: Callable[[], None]

    # FSM States
    STATE_OFFLINE = "offline"
    STATE_CONNECTING = "connecting"
    STATE_RESET_SENT = "reset_sent"
    STATE_STATUS_REQUESTED = "status_requested"
    STATE_CONFIGURED = "configured"
    STATE_RUNNING = "running"
    STATE_FAILED = "failed"

    _HANDSHAKE_STATES = (STATE_CONNECTING, STATE_RESET_SENT, STATE_STATUS_REQUESTED, STATE_CONFIGURED)

    def __init__(
        self,
        config: BridgeConfig,
        *,
        correlator: SequenceCorrelator,
        registry: ListenerRegistry,
        stats: BridgeStats,
        transport_factory: TransportFactory = create_transport,
        status_callback: StatusCallback | None = None,
    ) -> None:
        self._config = config
        self._correlator = correlator
        self._registry = registry
        self._stats = stats
        self._transport_factory = transport_factory
        self._status_callback = status_callback

        self._lock = threading.RLock()
        # Serializes frames on the link: handshake writes and caller sends.
        self._write_lock = threading.Lock()
        self._stopping = threading.Event()
        self._transport: Transport | None = None
        self._status = OFFLINE
        self._outbox: list[BridgeStatus] = []
        self._transceiver: TransceiverInfo | None = None
        self._handshake_started = 0.0
        self.last_error: Exception | None = None

        self.state_machine = Machine(
            model=self,
            states=[
                self.STATE_OFFLINE,
                self.STATE_CONNECTING,
                self.STATE_RESET_SENT,
                self.STATE_STATUS_REQUESTED,
                self.STATE_CONFIGURED,
                {"name": self.STATE_RUNNING, "on_enter": "_on_fsm_running"},
                self.STATE_FAILED,
            ],
            initial=self.STATE_OFFLINE,
            ignore_invalid_triggers=True,
            model_attribute="fsm_state",
        )

        self.state_machine.add_transition(trigger="begin_connect", source=self.STATE_OFFLINE, dest=self.STATE_CONNECTING)
        self.state_machine.add_transition(trigger="connected", source=self.STATE_CONNECTING, dest=self.STATE_RESET_SENT)
        self.state_machine.add_transition(
            trigger="request_status", source=self.STATE_RESET_SENT, dest=self.STATE_STATUS_REQUESTED
        )
        self.state_machine.add_transition(
            trigger="status_received", source=self.STATE_STATUS_REQUESTED, dest=self.STATE_CONFIGURED
        )
        self.state_machine.add_transition(
            trigger="receiver_started", source=self.STATE_CONFIGURED, dest=self.STATE_RUNNING
        )
        self.state_machine.add_transition(trigger="fail", source="*", dest=self.STATE_FAILED)
        self.state_machine.add_transition(trigger="settle", source=self.STATE_FAILED, dest=self.STATE_OFFLINE)
        self.state_machine.add_transition(trigger="shutdown", source="*", dest=self.STATE_OFFLINE)

    # ------------------------------------------------------------------
    # Introspection

    @property
    def config(self) -> BridgeConfig:
        return self._config

    @property
    def status(self) -> BridgeStatus:
        return self._status

    @property
    def transceiver(self) -> TransceiverInfo | None:
        return self._transceiver

    @property
    def transport(self) -> Transport | None:
        return self._transport

    @property
    def link_running(self) -> bool:
        return self.fsm_state == self.STATE_RUNNING

    # ------------------------------------------------------------------
    # Entry points

    def start(self) -> None:
        """Allow connection attempts; the supervisor drives the first one."""
        self._stopping.clear()

    def tick(self) -> None:
        """Connect when offline; restart a handshake that has stalled."""
        stale: Transport | None = None
        try:
            with self._lock:
                if self.fsm_state in self._HANDSHAKE_STATES:
                    elapsed = time.monotonic() - self._handshake_started
                    if elapsed < self._config.check_interval:
                        return
                    logger.warning("No answer from transceiver after %.1fs in state %s", elapsed, self.fsm_state)
                    stale = self._fail_locked("handshake timed out", StatusDetail.COMMUNICATION_ERROR)
            # The old link must be closed before a port can be reopened.
            self._close(stale)
            stale = None

            with self._lock:
                if self._stopping.is_set() or self.fsm_state != self.STATE_OFFLINE:
                    return
                stale = self._connect_locked()
        finally:
            self._close(stale)
            self._flush_status()

    def request_stop(self) -> None:
        """Refuse new connection attempts and cut a pending reset delay short."""
        self._stopping.set()
        self._correlator.abort()

    def stop(self) -> None:
        self.request_stop()
        with self._lock:
            transport = self._release_transport_locked()
            self.shutdown()
            self._set_status_locked(OFFLINE)
        self._close(transport)
        self._flush_status()

    def write(self, data: bytes) -> None:
        """Write a complete frame on the current link."""
        transport = self._transport
        if transport is None or not transport.connected:
            raise TransportIOError("Not connected to the RFXCOM transceiver")
        self._write_frame(transport, data)

    def mark_offline(self, detail: StatusDetail, reason: Exception | str) -> None:
        """Drop the link after a failed exchange; the supervisor reconnects."""
        with self._lock:
            if self._stopping.is_set():
                # Shutdown already published its own status.
                logger.debug("Ignoring failure after stop: %s", reason)
                transport = self._release_transport_locked()
            else:
                transport = self._fail_locked(reason, detail)
        self._close(transport)
        self._flush_status()

    # ------------------------------------------------------------------
    # PacketSink

    def packet_received(self, packet: bytes) -> None:
        self._stats.record_rx()
        try:
            message = messages.decode(packet)
        except MessageNotImplementedError:
            self._stats.not_implemented += 1
            logger.debug("Message not supported, data: %s", packet.hex().upper())
            return
        except MessageDecodeError:
            self._stats.decode_errors += 1
            logger.exception("Error occurred during packet receiving, data: %s", packet.hex().upper())
            return

        logger.debug("Message received: %s", message)
        if isinstance(message, InterfaceMessage):
            stale: Transport | None = None
            try:
                with self._lock:
                    stale = self._handle_interface_locked(message)
            finally:
                self._close(stale)
                self._flush_status()
        elif isinstance(message, TransmitterMessage):
            self._correlator.publish(message)
        elif isinstance(message, DeviceMessage):
            self._stats.device_messages += 1
            self._registry.dispatch(self._config.uid, message)

    def error_occurred(self, exc: TransportError) -> None:
        logger.error("Error occurred: %s", exc)
        self.mark_offline(StatusDetail.COMMUNICATION_ERROR, exc)

    # ------------------------------------------------------------------
    # Internals (callers hold self._lock)

    def _connect_locked(self) -> Transport | None:
        """Open a link and start the handshake; return a transport to close."""
        self.begin_connect()
        self._stats.connect_attempts += 1
        self._handshake_started = time.monotonic()
        self.last_error = None
        kind = self._config.transport_kind
        logger.debug("Connecting to RFXCOM transceiver (%s)", kind)

        try:
            transport = self._transport_factory(kind)
        except TransportUnavailableError as exc:
            logger.error("Cannot connect: %s", exc)
            return self._fail_locked(exc, StatusDetail.CONFIGURATION_ERROR)

        try:
            transport.connect(self._config)
        except NativeLinkError as exc:
            logger.error(
                "Error occurred when trying to load native library for OS '%s' version '%s', processor '%s': %s",
                platform.system(),
                platform.release(),
                platform.machine(),
                exc,
            )
            return self._fail_locked(exc, StatusDetail.COMMUNICATION_ERROR)
        except TransportError as exc:
            logger.error("Connection to RFXCOM transceiver failed: %s", exc)
            return self._fail_locked(exc, StatusDetail.COMMUNICATION_ERROR)

        if self._stopping.is_set():
            logger.debug("Stop requested while connecting")
            self.shutdown()
            return transport

        self._transport = transport
        self.connected()

        try:
            logger.debug("Reset controller")
            self._write_frame(transport, CMD_RESET)
            # The transceiver ignores everything sent shortly after a reset.
            if self._stopping.wait(self._config.reset_delay):
                logger.debug("Stop requested during reset delay")
                return None
            transport.subscribe(self)
            logger.debug("Get status of controller")
            self._write_frame(transport, CMD_GET_STATUS)
        except TransportError as exc:
            logger.error("Connection to RFXCOM transceiver failed: %s", exc)
            return self._fail_locked(exc, StatusDetail.COMMUNICATION_ERROR)
        self.request_status()
        return None

    def _handle_interface_locked(self, message: InterfaceMessage) -> Transport | None:
        if message.is_status_response:
            self._record_transceiver(message)
            if self.fsm_state != self.STATE_STATUS_REQUESTED:
                logger.debug("Ignoring status response in state %s", self.fsm_state)
                return None
            self.status_received()
            try:
                self._configure_locked(message)
            except TransportError as exc:
                logger.error("Failed to configure transceiver: %s", exc)
                return self._fail_locked(exc, StatusDetail.COMMUNICATION_ERROR)
            return None

        if message.is_receiver_started:
            if self.fsm_state == self.STATE_CONFIGURED:
                self.receiver_started()
            else:
                logger.debug("Receiver start reported in state %s", self.fsm_state)
            return None

        logger.debug(
            "Unhandled interface message (sub type 0x%02X, command 0x%02X)",
            message.sub_type,
            message.command,
        )
        return None

    def _configure_locked(self, status: InterfaceMessage) -> None:
        transport = self._transport
        if transport is None:
            return

        if self._config.ignore_config:
            logger.debug("Ignoring transceiver configuration")
        else:
            set_mode = parse_set_mode(self._config.set_mode)
            if set_mode is None:
                set_mode = (
                    InterfaceControlMessage.set_mode(
                        status.transceiver_type or 0,
                        protocol_mask=self._config.protocols.mode_bytes(),
                        transmit_power=self._config.transmit_power,
                    )
                    .with_seq(SET_MODE_SEQ)
                    .encode()
                )
            log_hexdump(logger, logging.DEBUG, "Setting RFXCOM mode", set_mode)
            self._write_frame(transport, set_mode)

        # SET_MODE is not acknowledged before starting; the transceiver
        # buffers both commands.
        logger.debug("Start receiver")
        self._write_frame(transport, CMD_START_RECEIVER)

    def _record_transceiver(self, message: InterfaceMessage) -> None:
        if message.transceiver_type is None:
            return
        hardware = None
        if message.hardware_version1 is not None:
            hardware = f"{message.hardware_version1}.{message.hardware_version2 or 0}"
        self._transceiver = TransceiverInfo(
            transceiver_type=message.transceiver_type,
            firmware_version=message.firmware_version,
            hardware_version=hardware,
            protocols=message.protocols,
        )
        logger.info(
            "RFXCOM transceiver/receiver type: %s, hw version: %s, fw version: %s",
            self._transceiver.type_name,
            hardware,
            message.firmware_version,
        )

    def _on_fsm_running(self) -> None:
        self._stats.last_online_unix = time.time()
        logger.info("RFXCOM receiver started on %s", self._config.endpoint)
        self._set_status_locked(ONLINE)

    def _fail_locked(self, reason: Exception | str, detail: StatusDetail) -> Transport | None:
        """Move to offline via failed and hand back the released transport."""
        self.last_error = reason if isinstance(reason, Exception) else TransportIOError(reason)
        if self.fsm_state == self.STATE_CONNECTING:
            self._stats.connect_failures += 1
        self._correlator.abort()
        transport = self._release_transport_locked()
        if self.fsm_state != self.STATE_OFFLINE:
            self.fail()
            self.settle()
        self._set_status_locked(BridgeStatus.offline(detail, str(reason)))
        return transport

    def _release_transport_locked(self) -> Transport | None:
        transport, self._transport = self._transport, None
        return transport

    def _write_frame(self, transport: Transport, data: bytes) -> None:
        with self._write_lock:
            transport.write(data)

    @staticmethod
    def _close(transport: Transport | None) -> None:
        if transport is None:
            return
        transport.subscribe(None)
        transport.disconnect()

    def _set_status_locked(self, status: BridgeStatus) -> None:
        if status == self._status:
            return
        self._status = status
        self._outbox.append(status)

    def _flush_status(self) -> None:
        with self._lock:
            pending, self._outbox = self._outbox, []
        if self._status_callback is None:
            return
        for status in pending:
            try:
                self._status_callback(status)
            except Exception:
                logger.exception("Status callback failed")
