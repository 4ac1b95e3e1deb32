"""Outbound sequence numbering and transmitter acknowledgement rendezvous."""

from __future__ import annotations

import logging
import threading

from ..protocol.messages import TransmitterMessage
from ..protocol.protocol import UINT8_MASK
from ..state import BridgeStats

logger = logging.getLogger("rfxbridge.correlator")


class SequenceCorrelator:
    """Owns the rolling sequence number and the single response slot.

    Sequence numbers run 1..255 and wrap back to 1; zero is only ever the
    initial value. An acknowledgement is accepted only when it carries the
    most recently allocated number.
    """

    def __init__(self, stats: BridgeStats | None = None) -> None:
        self._cond = threading.Condition()
        self._seq = 0
        self._response: TransmitterMessage | None = None
        self._aborted = False
        self._stats = stats

    def next_seq(self) -> int:
        with self._cond:
            self._seq = (self._seq + 1) & UINT8_MASK
            if self._seq == 0:
                self._seq = 1
            return self._seq

    def current_seq(self) -> int:
        with self._cond:
            return self._seq

    def clear(self) -> None:
        with self._cond:
            self._response = None
            self._aborted = False

    def abort(self) -> None:
        """Wake a pending waiter empty-handed; the link it waits on is gone."""
        with self._cond:
            self._aborted = True
            self._cond.notify_all()

    def publish(self, ack: TransmitterMessage) -> bool:
        with self._cond:
            if ack.seq_nbr != self._seq:
                logger.warning(
                    "Sequence number %d does not match, expecting number %d",
                    ack.seq_nbr,
                    self._seq,
                )
                if self._stats is not None:
                    self._stats.sequence_mismatches += 1
                return False
            logger.debug("Transmitter response received: %s (seq %d)", ack.response.name, ack.seq_nbr)
            self._response = ack
            self._cond.notify()
            return True

    def await_response(self, timeout: float) -> TransmitterMessage | None:
        """Block up to *timeout* seconds for the acknowledgement; consume it."""
        with self._cond:
            self._cond.wait_for(lambda: self._response is not None or self._aborted, timeout)
            response, self._response = self._response, None
            return response
