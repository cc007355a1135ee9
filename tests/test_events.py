"""Event emitter and virtual scheduler."""

from dynamic_bridge.events import EventEmitter, SessionEvent
from dynamic_bridge.scheduling import VirtualScheduler


class TestEventEmitter:
    def test_enum_and_string_keys_match(self):
        emitter = EventEmitter()
        seen = []
        emitter.on(SessionEvent.ERROR, seen.append)
        assert emitter.emit("error", "boom") == 1
        assert seen == ["boom"]

    def test_once(self):
        emitter = EventEmitter()
        seen = []
        emitter.once("tick", seen.append)
        emitter.emit("tick", 1)
        emitter.emit("tick", 2)
        assert seen == [1]
        assert not emitter.has_listeners("tick")

    def test_remove_twice_is_harmless(self):
        emitter = EventEmitter()
        remove = emitter.on("tick", print)
        remove()
        remove()
        assert emitter.emit("tick") == 0

    def test_clear_single_event(self):
        emitter = EventEmitter()
        emitter.on("a", print)
        emitter.on("b", print)
        emitter.clear("a")
        assert not emitter.has_listeners("a")
        assert emitter.has_listeners("b")


class TestVirtualScheduler:
    def test_runs_due_callbacks_in_order(self):
        scheduler = VirtualScheduler()
        seen = []
        scheduler.call_later(2.0, seen.append, "late")
        scheduler.call_later(1.0, seen.append, "early")
        assert scheduler.advance(1.5) == 1
        assert seen == ["early"]
        assert scheduler.time() == 1.5
        scheduler.advance(1.0)
        assert seen == ["early", "late"]

    def test_cancelled_handles_do_not_run(self):
        scheduler = VirtualScheduler()
        seen = []
        handle = scheduler.call_later(1.0, seen.append, "x")
        handle.cancel()
        assert handle.cancelled()
        scheduler.advance(5)
        assert seen == []
        assert scheduler.pending == 0

    def test_callbacks_scheduled_while_advancing(self):
        scheduler = VirtualScheduler()
        seen = []

        def first():
            seen.append("first")
            scheduler.call_later(0.5, seen.append, "second")
        scheduler.call_later(1.0, first)
        scheduler.advance(2.0)
        assert seen == ["first", "second"]

    def test_run_all(self):
        scheduler = VirtualScheduler()
        seen = []
        scheduler.call_later(100, seen.append, 1)
        scheduler.call_later(300, seen.append, 2)
        scheduler.run_all()
        assert seen == [1, 2]
