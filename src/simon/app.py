from __future__ import annotations

import logging
import os
from typing import Optional

from .audio import ToneBank
from .config import Settings
from .engine import SimonEngine
from .events import GameEvent
from .loop import GameLoop, LoopConfig
from .models import DEFAULT_PALETTE, SYMBOL_COUNT, GamePhase
from .persistence import RecordStore, open_store
from .rng import SequenceRNG
from .scheduler import Scheduler

logger = logging.getLogger(__name__)

FAST_DT = 0.05
# Upper bound on virtual-time ticks so a misbehaving run cannot spin forever.
FAST_MAX_STEPS = 200_000


def _arcade_available() -> bool:
    try:
        import arcade  # noqa: F401
        return True
    except Exception:
        return False


def build_engine(settings: Settings, store: RecordStore, seed: Optional[int] = None) -> SimonEngine:
    return SimonEngine(
        store=store,
        timing=settings.timing,
        scheduler=Scheduler(),
        rng=SequenceRNG(seed),
    )


class AutoPlayer:
    """Plays the game on its own for headless runs.

    Replays the sequence correctly for the first ``rounds`` rounds and then
    presses a wrong symbol so every run ends in a game over.
    """

    def __init__(self, engine: SimonEngine, rounds: int = 3) -> None:
        self.engine = engine
        self.rounds = max(0, rounds)

    def on_tick(self, dt: float) -> None:
        engine = self.engine
        if not engine.accepts_input:
            return
        expected = engine.sequence[engine.player_cursor]
        if engine.level <= self.rounds:
            engine.submit_input(expected)
        else:
            engine.submit_input((expected + 1) % SYMBOL_COUNT)


class ConsoleReporter:
    """Prints engine messages and presented symbols to stdout."""

    def __init__(self, engine: SimonEngine) -> None:
        self.engine = engine
        self._last_message = engine.message
        engine.add_listener(self._on_event)

    def _on_event(self, event: GameEvent, engine: SimonEngine) -> None:
        if event is GameEvent.MESSAGE_CHANGED:
            text, previous = engine.message, self._last_message
            self._last_message = text
            # Appended notices only print the new lines.
            if previous and text.startswith(previous):
                text = text[len(previous):]
            for line in text.splitlines():
                if line:
                    print(line)
        elif event is GameEvent.ACTIVE_SYMBOL_CHANGED and engine.phase is GamePhase.PRESENTING:
            if engine.active_symbol is not None:
                spec = DEFAULT_PALETTE[engine.active_symbol]
                print(f"  {spec.label} {spec.name}")


def run_gui(settings: Optional[Settings] = None, seed: Optional[int] = None) -> int:
    """Run the game in an Arcade window, or headless when Arcade is missing.

    Returns:
        Process exit code (0 on success).
    """
    settings = settings or Settings.load()
    if not _arcade_available():
        logger.warning("Arcade not available; falling back to headless mode")
        return run_headless(settings, seed=seed)

    import arcade

    from .ui.window import SimonWindow

    store = open_store(settings.storage)
    engine = build_engine(settings, store, seed)
    tones = ToneBank(settings=settings.audio)
    try:
        SimonWindow(engine, settings.window)
        tones.prepare()
        tones.attach(engine)
        logger.info("Launching Arcade window")
        arcade.run()
        logger.info("Arcade loop finished")
        return 0
    except Exception:
        logger.exception("Unhandled exception in GUI loop; exiting with code 1")
        return 1
    finally:
        store.close()


def run_headless(
    settings: Optional[Settings] = None,
    seed: Optional[int] = None,
    rounds: int = 3,
    fast: bool = False,
) -> int:
    """Play one automated game in the console.

    Args:
        rounds: Rounds the auto-player completes before it errs.
        fast: Advance virtual time in fixed steps without sleeping.
    """
    settings = settings or Settings.load()
    print("Simon Kawaii (headless)")
    print("Press Ctrl+C to exit. Running...\n")

    store = open_store(settings.storage)
    engine = build_engine(settings, store, seed)
    ConsoleReporter(engine)
    print(engine.message)
    player = AutoPlayer(engine, rounds)
    if fast:
        config = LoopConfig(tick_rate=0, max_steps=FAST_MAX_STEPS, fixed_dt=FAST_DT)
    else:
        config = LoopConfig(tick_rate=60.0)
    loop = GameLoop(engine.scheduler, config)
    loop.add_tick_hook(player.on_tick)

    def _stop_on_game_over(dt: float) -> None:
        if engine.phase is GamePhase.FAILED:
            loop.stop()

    loop.add_tick_hook(_stop_on_game_over)

    try:
        engine.start()
        loop.run()
        if engine.terminal_level is None:
            logger.error("Headless run stopped before the game ended (steps=%d)", loop.step)
            return 1
        print(f"\nGame over at level {engine.terminal_level} (record: {engine.record.high_score})")
        return 0
    except KeyboardInterrupt:
        loop.stop()
        print("Interrupted by user")
        return 130
    except Exception:
        logger.exception("Unhandled exception in headless loop")
        return 1
    finally:
        store.close()


def run_auto(settings: Optional[Settings] = None, seed: Optional[int] = None, rounds: int = 3, fast: bool = False) -> int:
    """Run GUI if available, else headless. SIMON_HEADLESS=1 forces headless."""
    if os.getenv("SIMON_HEADLESS") == "1":
        return run_headless(settings, seed=seed, rounds=rounds, fast=fast)
    return run_gui(settings, seed=seed)
