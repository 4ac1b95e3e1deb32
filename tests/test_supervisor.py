"""Tests for the periodic link supervisor."""

from __future__ import annotations

import threading
import time

from rfxbridge.services.supervisor import LinkSupervisor

from tests.mocks import wait_for


def test_first_check_is_immediate() -> None:
    ticked = threading.Event()
    supervisor = LinkSupervisor(ticked.set, lambda: False, interval=60.0)
    supervisor.start()
    try:
        assert ticked.wait(1.0)
    finally:
        supervisor.cancel()
    assert not supervisor.active


def test_ticks_repeat_while_not_running() -> None:
    calls: list[float] = []
    supervisor = LinkSupervisor(lambda: calls.append(time.monotonic()), lambda: False, interval=0.02)
    supervisor.start()
    try:
        assert wait_for(lambda: len(calls) >= 3)
    finally:
        supervisor.cancel()


def test_no_tick_while_link_running() -> None:
    calls: list[int] = []
    supervisor = LinkSupervisor(lambda: calls.append(1), lambda: True, interval=0.01)
    supervisor.start()
    try:
        assert wait_for(lambda: supervisor.checks >= 3)
    finally:
        supervisor.cancel()
    assert calls == []


def test_failing_tick_does_not_stop_schedule(caplog) -> None:
    attempts: list[int] = []

    def tick() -> None:
        attempts.append(1)
        raise RuntimeError("port vanished")

    supervisor = LinkSupervisor(tick, lambda: False, interval=0.01)
    supervisor.start()
    try:
        assert wait_for(lambda: len(attempts) >= 2)
    finally:
        supervisor.cancel()
    assert "port vanished" in caplog.text


def test_cancel_interrupts_sleep_and_is_idempotent() -> None:
    supervisor = LinkSupervisor(lambda: None, lambda: False, interval=60.0)
    supervisor.start()
    assert wait_for(lambda: supervisor.checks == 1)

    start = time.monotonic()
    supervisor.cancel()
    supervisor.cancel()

    assert time.monotonic() - start < 1.0
    assert not supervisor.active
    assert supervisor.checks == 1


def test_cancel_from_own_thread_does_not_deadlock() -> None:
    holder: dict[str, LinkSupervisor] = {}
    done = threading.Event()

    def tick() -> None:
        holder["supervisor"].cancel()
        done.set()

    supervisor = LinkSupervisor(tick, lambda: False, interval=0.01)
    holder["supervisor"] = supervisor
    supervisor.start()

    assert done.wait(1.0)
    assert wait_for(lambda: not supervisor.active)
