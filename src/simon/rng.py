from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Optional

from .models import SYMBOL_COUNT


@dataclass
class SequenceRNG:
    """
    Seedable source of sequence symbols wrapping random.Random.

    Each draw is independent and uniform over the alphabet; repeats are
    allowed. Pass a seed for reproducible games and tests.
    """

    seed: Optional[int] = None
    symbol_count: int = SYMBOL_COUNT

    def __post_init__(self) -> None:
        if self.symbol_count <= 0:
            raise ValueError("symbol_count must be positive")
        self._rng = random.Random(self.seed)

    def next_symbol(self) -> int:
        """Return the next symbol in [0, symbol_count)."""
        return self._rng.randrange(self.symbol_count)

    def reseed(self, seed: Optional[int]) -> None:
        self.seed = seed
        self._rng = random.Random(seed)

    def state(self):
        """Return the internal PRNG state for debugging or replay."""
        return self._rng.getstate()

    def set_state(self, state) -> None:
        self._rng.setstate(state)
