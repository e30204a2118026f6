from __future__ import annotations

import heapq
import itertools
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, List, Tuple

logger = logging.getLogger(__name__)


@dataclass
class TimerHandle:
    """Handle returned by Scheduler.call_later; cancel() drops the callback."""

    due: float
    callback: Callable[..., Any]
    args: Tuple[Any, ...] = ()
    cancelled: bool = field(default=False, compare=False)

    def cancel(self) -> None:
        self.cancelled = True


class Scheduler:
    """Single-threaded cooperative timer queue.

    Time only moves when the owner calls advance() (typically once per frame
    from the game loop) or run_pending(). Callbacks due at the same instant
    run in the order they were scheduled, and callbacks scheduled while
    advancing run in the same advance if they fall inside the window.
    """

    def __init__(self) -> None:
        self._now: float = 0.0
        self._counter = itertools.count()
        self._heap: List[Tuple[float, int, TimerHandle]] = []

    @property
    def now(self) -> float:
        """Virtual time in seconds since the scheduler was created."""
        return self._now

    @property
    def pending(self) -> int:
        """Number of live (not cancelled) timers."""
        return sum(1 for _, _, h in self._heap if not h.cancelled)

    def call_later(self, delay: float, callback: Callable[..., Any], *args: Any) -> TimerHandle:
        if delay < 0:
            raise ValueError(f"delay must be non-negative, got {delay}")
        handle = TimerHandle(due=self._now + delay, callback=callback, args=args)
        heapq.heappush(self._heap, (handle.due, next(self._counter), handle))
        return handle

    def call_soon(self, callback: Callable[..., Any], *args: Any) -> TimerHandle:
        return self.call_later(0.0, callback, *args)

    def advance(self, dt: float) -> int:
        """Move time forward by dt seconds, running every callback that falls due.

        Returns the number of callbacks executed.
        """
        if dt < 0:
            raise ValueError(f"dt must be non-negative, got {dt}")
        target = self._now + dt
        ran = 0
        while self._heap and self._heap[0][0] <= target:
            due, _, handle = heapq.heappop(self._heap)
            if handle.cancelled:
                continue
            self._now = due
            self._run(handle)
            ran += 1
        self._now = target
        return ran

    def run_pending(self, max_callbacks: int = 100_000) -> int:
        """Jump through time until no timers remain.

        Useful for headless simulation and tests. Stops after max_callbacks to
        guard against self-rescheduling callbacks.
        """
        ran = 0
        while self._heap and ran < max_callbacks:
            due, _, handle = heapq.heappop(self._heap)
            if handle.cancelled:
                continue
            self._now = max(self._now, due)
            self._run(handle)
            ran += 1
        if self._heap and ran >= max_callbacks:
            logger.warning("run_pending stopped after %d callbacks with timers still queued", ran)
        return ran

    def cancel_all(self) -> None:
        for _, _, handle in self._heap:
            handle.cancel()
        self._heap.clear()

    def _run(self, handle: TimerHandle) -> None:
        try:
            handle.callback(*handle.args)
        except Exception:  # pragma: no cover - callbacks shouldn't crash the loop
            logger.exception("Scheduled callback %r raised", handle.callback)
