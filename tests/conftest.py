import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

# Ensure 'src' is on sys.path for test imports without installing the package
ROOT = Path(__file__).resolve().parents[1]
src = ROOT / "src"
if str(src) not in sys.path:
    sys.path.insert(0, str(src))

from simon.config import TimingSettings  # noqa: E402
from simon.engine import SimonEngine  # noqa: E402
from simon.persistence import InMemoryRecordStore  # noqa: E402
from simon.rng import SequenceRNG  # noqa: E402
from simon.scheduler import Scheduler  # noqa: E402

FROZEN_NOW = datetime(2024, 5, 17, 12, 30, 15, 123000, tzinfo=timezone.utc)


class ScriptedRNG:
    """Yields a fixed list of symbols, then repeats the last one."""

    def __init__(self, symbols):
        self.symbols = list(symbols)
        self.calls = 0

    def next_symbol(self) -> int:
        index = min(self.calls, len(self.symbols) - 1)
        self.calls += 1
        return self.symbols[index]


@pytest.fixture
def timing() -> TimingSettings:
    return TimingSettings()


@pytest.fixture
def scheduler() -> Scheduler:
    return Scheduler()


@pytest.fixture
def store() -> InMemoryRecordStore:
    return InMemoryRecordStore()


@pytest.fixture
def clock():
    return lambda: FROZEN_NOW


@pytest.fixture
def make_engine(timing, scheduler, store, clock):
    """Build an engine with a manual scheduler and a frozen clock."""

    def _make(rng=None, record_store=None):
        return SimonEngine(
            store=record_store if record_store is not None else store,
            timing=timing,
            scheduler=scheduler,
            rng=rng if rng is not None else SequenceRNG(seed=1234),
            clock=clock,
        )

    return _make


@pytest.fixture
def engine(make_engine):
    return make_engine()


def present(engine: SimonEngine) -> None:
    """Advance time until the current sequence has been fully presented."""
    t = engine.timing
    engine.scheduler.advance(t.pre_roll + len(engine.sequence) * (t.lit + t.gap) + 0.001)


def settle(engine: SimonEngine) -> None:
    """Advance past the pause after a completed round."""
    engine.scheduler.advance(engine.timing.settle + 0.001)


def replay(engine: SimonEngine) -> None:
    """Enter the whole current sequence correctly."""
    for symbol in engine.sequence:
        engine.submit_input(symbol)
