"""Timer helpers used by the link form (debounce, transient indicators)."""

from __future__ import annotations

import asyncio
from typing import Callable, Optional, Protocol


class Cancellable(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], None]) -> Cancellable: ...


class LoopScheduler:
    """Schedules callbacks on the running asyncio loop."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        return asyncio.get_running_loop().call_later(delay, callback)


class Debouncer:
    """
    Runs ``callback`` once input pauses for ``delay`` seconds.

    One instance is kept for the lifetime of its owner; every ``trigger`` pushes
    the deadline back, so a burst of calls fires a single callback.
    """

    def __init__(
        self,
        callback: Callable[[], None],
        delay: float,
        *,
        scheduler: Optional[Scheduler] = None,
    ) -> None:
        self._callback = callback
        self.delay = max(0.0, delay)
        self._scheduler = scheduler or LoopScheduler()
        self._handle: Optional[Cancellable] = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def trigger(self) -> None:
        self.cancel()
        self._handle = self._scheduler.call_later(self.delay, self._fire)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        self._handle = None
        self._callback()


class CopyIndicator:
    """Flag that turns on when a value is copied and reverts after ``reset_after`` seconds."""

    def __init__(self, reset_after: float = 3.0, *, scheduler: Optional[Scheduler] = None) -> None:
        self.reset_after = reset_after
        self._scheduler = scheduler or LoopScheduler()
        self._handle: Optional[Cancellable] = None
        self.copied = False

    def flash(self) -> None:
        # a later copy supersedes the pending revert
        self.clear()
        self.copied = True
        self._handle = self._scheduler.call_later(self.reset_after, self._revert)

    def clear(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        self.copied = False

    def _revert(self) -> None:
        self._handle = None
        self.copied = False
