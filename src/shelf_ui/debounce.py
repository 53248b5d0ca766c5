"""Timer-based coalescing of rapid calls (search-as-you-type)."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Protocol

log = logging.getLogger(__name__)


class TimerHandle(Protocol):
    def cancel(self) -> Any: ...


Schedule = Callable[[float, Callable[[], None]], TimerHandle]


def running_loop_scheduler(delay: float, fn: Callable[[], None]) -> TimerHandle:
    """Run *fn* after *delay* seconds on the running event loop.

    Raises ``RuntimeError`` when called outside a running loop.
    """
    return asyncio.get_running_loop().call_later(delay, fn)


def loop_scheduler(loop: asyncio.AbstractEventLoop) -> Schedule:
    """Adapt ``loop.call_later`` so callbacks run on the event loop thread."""

    def schedule(delay: float, fn: Callable[[], None]) -> TimerHandle:
        return loop.call_later(delay, fn)

    return schedule


class Debouncer:
    """Delays *callback* until calls stop arriving for *delay* seconds.

    Each call replaces the pending value and restarts the quiet period.
    The most recent value is always delivered: cancelling earlier timers
    never drops the final call. Callbacks run wherever *schedule* runs
    them; the default is the caller's event loop.
    """

    def __init__(
        self,
        delay: float,
        callback: Callable[[Any], None],
        schedule: Schedule = running_loop_scheduler,
    ) -> None:
        self.delay = delay
        self._callback = callback
        self._schedule = schedule
        self._handle: TimerHandle | None = None
        self._generation = 0
        self._pending = False
        self._value: Any = None

    @property
    def pending(self) -> bool:
        return self._pending

    def __call__(self, value: Any) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        self._generation += 1
        generation = self._generation
        self._value = value
        self._pending = True
        if self.delay <= 0:
            self._fire(generation)
            return
        self._handle = self._schedule(self.delay, lambda: self._fire(generation))

    def flush(self) -> None:
        """Deliver the pending value now, if any."""
        if not self._pending:
            return
        if self._handle is not None:
            self._handle.cancel()
        self._fire(self._generation)

    def cancel(self) -> None:
        """Discard the pending value without delivering it."""
        if self._handle is not None:
            self._handle.cancel()
        self._handle = None
        self._pending = False
        self._generation += 1

    def _fire(self, generation: int) -> None:
        # A newer call or a cancel superseded this timer.
        if generation != self._generation or not self._pending:
            return
        value = self._value
        self._pending = False
        self._handle = None
        self._value = None
        self._callback(value)
