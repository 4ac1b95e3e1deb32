"""Periodic link health check."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

import tenacity

logger = logging.getLogger("rfxbridge.supervisor")


class LinkSupervisor:
    """Calls ``tick`` every ``interval`` seconds unless the link is running.

    The first check runs immediately. The schedule is a ``tenacity`` loop that
    never gives up on its own: it stops when :meth:`cancel` sets the event,
    which also interrupts the sleep between checks.
    """

    def __init__(
        self,
        tick: Callable[[], None],
        is_running: Callable[[], bool],
        interval: float,
        *,
        name: str = "rfxbridge-supervisor",
    ) -> None:
        self._tick = tick
        self._is_running = is_running
        self._interval = interval
        self._name = name
        self._cancelled = threading.Event()
        self._thread: threading.Thread | None = None
        self.checks = 0

    @property
    def active(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.active:
            return
        self._cancelled.clear()
        self._thread = threading.Thread(target=self._run, name=self._name, daemon=True)
        self._thread.start()

    def cancel(self) -> None:
        self._cancelled.set()
        thread, self._thread = self._thread, None
        if thread is not None and thread is not threading.current_thread():
            thread.join()

    def _before_sleep(self, retry_state: tenacity.RetryCallState) -> None:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        if exc is not None:
            logger.error("Link check failed (%s); next check in %.1fs", exc, self._interval)
        else:
            logger.debug("Next link check in %.1fs", self._interval)

    def _check(self) -> None:
        if self._cancelled.is_set():
            return
        self.checks += 1
        if self._is_running():
            return
        logger.debug("Link not running; attempting to (re)connect")
        self._tick()

    def _run(self) -> None:
        retryer = tenacity.Retrying(
            sleep=self._cancelled.wait,
            wait=tenacity.wait_fixed(self._interval),
            stop=tenacity.stop_when_event_set(self._cancelled),
            retry=tenacity.retry_always,
            before_sleep=self._before_sleep,
            reraise=False,
        )
        try:
            retryer(self._check)
        except tenacity.RetryError:
            # Raised once the cancel event stops the schedule.
            pass
        logger.debug("Supervisor stopped")
