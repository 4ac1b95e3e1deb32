"""Tests for the listener registry."""

from __future__ import annotations

from rfxbridge.protocol.messages import DeviceMessage, Message
from rfxbridge.protocol.protocol import PacketType
from rfxbridge.services.listeners import ListenerRegistry
from rfxbridge.state import BridgeStats

MESSAGE = DeviceMessage(packet_type=PacketType.LIGHTING2, data=bytes(8))


class RecordingListener:
    def __init__(self, name: str, log: list[str]) -> None:
        self.name = name
        self.log = log

    def on_device_message(self, source_id: str, message: Message) -> None:
        self.log.append(self.name)


def test_register_is_duplicate_free() -> None:
    registry = ListenerRegistry()
    listener = RecordingListener("a", [])
    assert registry.register(listener) is True
    assert registry.register(listener) is False
    assert len(registry) == 1
    assert listener in registry


def test_unregister_reports_presence() -> None:
    registry = ListenerRegistry()
    listener = RecordingListener("a", [])
    assert registry.unregister(listener) is False
    registry.register(listener)
    assert registry.unregister(listener) is True
    assert len(registry) == 0


def test_dispatch_follows_registration_order() -> None:
    log: list[str] = []
    registry = ListenerRegistry()
    for name in ("a", "b", "c"):
        registry.register(RecordingListener(name, log))
    assert registry.dispatch("rfxcom:bridge", MESSAGE) == 3
    assert log == ["a", "b", "c"]


def test_failing_listener_does_not_stop_the_rest(caplog) -> None:
    log: list[str] = []
    stats = BridgeStats()
    registry = ListenerRegistry(stats)

    def broken(source_id: str, message: Message) -> None:
        raise RuntimeError("boom")

    registry.register(broken)
    registry.register(RecordingListener("b", log))
    registry.register(RecordingListener("c", log))

    assert registry.dispatch("rfxcom:bridge", MESSAGE) == 2
    assert log == ["b", "c"]
    assert stats.listener_errors == 1
    assert "boom" in caplog.text


def test_callable_listener_receives_source_and_message() -> None:
    received: list[tuple[str, Message]] = []
    registry = ListenerRegistry()
    registry.register(lambda source_id, message: received.append((source_id, message)))
    registry.dispatch("bridge-1", MESSAGE)
    assert received == [("bridge-1", MESSAGE)]


def test_dispatch_uses_snapshot_taken_at_entry() -> None:
    log: list[str] = []
    registry = ListenerRegistry()
    late = RecordingListener("late", log)

    class Registering:
        def on_device_message(self, source_id: str, message: Message) -> None:
            log.append("first")
            registry.register(late)
            registry.unregister(second)

    second = RecordingListener("second", log)
    registry.register(Registering())
    registry.register(second)

    registry.dispatch("src", MESSAGE)
    assert log == ["first", "second"]

    log.clear()
    registry.dispatch("src", MESSAGE)
    assert log == ["first", "late"]


def test_clear_removes_everything() -> None:
    registry = ListenerRegistry()
    registry.register(RecordingListener("a", []))
    registry.clear()
    assert len(registry) == 0
    assert registry.snapshot() == ()
