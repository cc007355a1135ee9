"""
Cancellable delayed callbacks.

The session controller never sleeps; it asks a scheduler to call it back.
`AsyncioScheduler` wraps `loop.call_later` for real hosts. `VirtualScheduler`
keeps a manual clock so tests can fast-forward with `advance()`.
"""

import asyncio
import heapq
import itertools
from typing import Any, Callable, Optional, Protocol


class Handle(Protocol):
    def cancel(self) -> None: ...

    def cancelled(self) -> bool: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> Handle: ...

    def time(self) -> float: ...


class AsyncioScheduler:
    """Schedules on an asyncio loop; TimerHandles are returned as-is."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            try:
                self._loop = asyncio.get_running_loop()
            except RuntimeError:
                self._loop = asyncio.get_event_loop()
        return self._loop

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> asyncio.TimerHandle:
        return self.loop.call_later(max(delay, 0.0), callback, *args)

    def time(self) -> float:
        return self.loop.time()


class VirtualHandle:
    __slots__ = ("when", "callback", "args", "_cancelled")

    def __init__(self, when: float, callback: Callable[..., Any], args: tuple[Any, ...]):
        self.when = when
        self.callback = callback
        self.args = args
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    def cancelled(self) -> bool:
        return self._cancelled

    def __repr__(self) -> str:
        state = " cancelled" if self._cancelled else ""
        return f"<VirtualHandle when={self.when}{state}>"


class VirtualScheduler:
    """Manual clock. Nothing runs until `advance()` or `run_all()` is called."""

    def __init__(self, start: float = 0.0):
        self._now = start
        self._heap: list[tuple[float, int, VirtualHandle]] = []
        self._seq = itertools.count()

    def time(self) -> float:
        return self._now

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> VirtualHandle:
        handle = VirtualHandle(self._now + max(delay, 0.0), callback, args)
        heapq.heappush(self._heap, (handle.when, next(self._seq), handle))
        return handle

    @property
    def pending(self) -> int:
        return sum(1 for _, _, h in self._heap if not h.cancelled())

    def advance(self, seconds: float) -> int:
        """Move the clock forward, running every callback that falls due.

        Callbacks scheduled while advancing run too if they are due before the
        target time. Returns the number of callbacks run.
        """
        target = self._now + seconds
        ran = 0
        while self._heap and self._heap[0][0] <= target:
            when, _, handle = heapq.heappop(self._heap)
            if handle.cancelled():
                continue
            self._now = max(self._now, when)
            handle.callback(*handle.args)
            ran += 1
        self._now = target
        return ran

    def run_all(self, limit: int = 1000) -> int:
        """Run until nothing is pending; `limit` guards against self-rescheduling loops."""
        ran = 0
        while self._heap and ran < limit:
            when, _, handle = heapq.heappop(self._heap)
            if handle.cancelled():
                continue
            self._now = max(self._now, when)
            handle.callback(*handle.args)
            ran += 1
        return ran
