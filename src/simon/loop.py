from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, List, Optional

from .scheduler import Scheduler

logger = logging.getLogger(__name__)


@dataclass
class LoopConfig:
    """Configuration for the headless game loop.

    Attributes:
        tick_rate: Target updates per second. If 0 or None, updates as fast as possible.
        max_steps: If provided and > 0, the loop will automatically stop after this many updates.
        fixed_dt: If set, every update advances time by exactly this many seconds
            instead of the measured wall-clock delta (deterministic fast simulation).
    """

    tick_rate: float = 60.0
    max_steps: Optional[int] = None
    fixed_dt: Optional[float] = None


class GameLoop:
    """Frame loop that drives a Scheduler.

    Keeps timing out of the engine so the same engine can be driven by Arcade's
    on_update, by this loop in a console, or by tests stepping time by hand.
    """

    def __init__(self, scheduler: Scheduler, config: Optional[LoopConfig] = None) -> None:
        self.scheduler = scheduler
        self.config = config or LoopConfig()
        self._running: bool = False
        self._step: int = 0
        self._last_time: Optional[float] = None
        self._tick_hooks: List[Callable[[float], None]] = []

    @property
    def running(self) -> bool:
        return self._running

    @property
    def step(self) -> int:
        return self._step

    def add_tick_hook(self, hook: Callable[[float], None]) -> None:
        """Call hook(dt) after the scheduler has been advanced on every tick."""
        self._tick_hooks.append(hook)

    def start(self) -> None:
        """Start the loop state. Subsequent calls are no-ops."""
        if self._running:
            logger.debug("GameLoop.start() called while already running")
            return
        self._running = True
        self._step = 0
        self._last_time = time.perf_counter()
        logger.info(
            "GameLoop started (tick_rate=%s, max_steps=%s, fixed_dt=%s)",
            self.config.tick_rate,
            self.config.max_steps,
            self.config.fixed_dt,
        )

    def stop(self) -> None:
        if not self._running:
            return
        self._running = False
        logger.info("GameLoop stopped at step=%s", self._step)

    def update(self, dt: float) -> None:
        """Perform a single tick: advance scheduled timers by dt seconds."""
        if not self._running:
            logger.debug("update() called while not running; ignored")
            return
        self._step += 1
        self.scheduler.advance(dt)
        for hook in list(self._tick_hooks):
            hook(dt)

        limit = self.config.max_steps
        if limit is not None and 0 < limit <= self._step:
            self.stop()

    def run(self) -> None:
        """Block, ticking the scheduler until stopped or max_steps is reached."""
        self.start()
        frame = 1.0 / self.config.tick_rate if self.config.tick_rate else 0.0
        while self._running:
            began = time.perf_counter()
            self.update(self._next_dt(began))
            spare = frame - (time.perf_counter() - began)
            if spare > 0:
                time.sleep(spare)
        logger.info("Loop finished after %d steps", self._step)

    def _next_dt(self, now: float) -> float:
        last, self._last_time = self._last_time, now
        if self.config.fixed_dt is not None:
            return self.config.fixed_dt
        return 0.0 if last is None else now - last
