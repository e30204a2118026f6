from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Dict, Tuple

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# The alphabet is fixed; the engine treats symbols as ints in [0, SYMBOL_COUNT).
SYMBOL_COUNT = 4


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def hex_to_rgb(value: str) -> Tuple[int, int, int]:
    value = value.lstrip("#")
    return (int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16))


@dataclass(frozen=True)
class SymbolSpec:
    """Display and audio mapping for one symbol.

    Owned by the UI layer; the engine never looks past ``id``.
    """

    id: int
    name: str
    frequency: float  # Hz
    color_hex: str
    active_hex: str
    label: str

    @property
    def color(self) -> Tuple[int, int, int]:
        return hex_to_rgb(self.color_hex)

    @property
    def active_color(self) -> Tuple[int, int, int]:
        return hex_to_rgb(self.active_hex)


DEFAULT_PALETTE: Tuple[SymbolSpec, ...] = (
    SymbolSpec(0, "Mint", 329.63, "#6EE7B7", "#A7F3D0", "🌱"),
    SymbolSpec(1, "Sakura", 440.00, "#F472B6", "#FBCFE8", "🌸"),
    SymbolSpec(2, "Sky", 554.37, "#7DD3FC", "#BAE6FD", "☁️"),
    SymbolSpec(3, "Lemon", 659.25, "#FDE047", "#FEF9C3", "🍋"),
)


class GamePhase(str, Enum):
    """Phases of a single game."""

    IDLE = "idle"
    PRESENTING = "presenting"
    AWAITING_INPUT = "awaiting_input"
    FAILED = "failed"


def _truncate_to_millis(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.replace(microsecond=(moment.microsecond // 1000) * 1000)


@dataclass(frozen=True)
class Record:
    """The single best score and when it was achieved.

    ``Record()`` (score 0 at the epoch) means "no record yet". Timestamps are
    kept at millisecond precision so a record survives a round trip through
    any store unchanged.
    """

    high_score: int = 0
    achieved_at: datetime = field(default=EPOCH)

    def __post_init__(self) -> None:
        if self.high_score < 0:
            raise ValueError(f"high_score must be non-negative, got {self.high_score}")
        object.__setattr__(self, "achieved_at", _truncate_to_millis(self.achieved_at))

    @property
    def is_set(self) -> bool:
        return self.high_score > 0

    @property
    def timestamp_ms(self) -> int:
        return (self.achieved_at - EPOCH) // timedelta(milliseconds=1)

    @classmethod
    def from_millis(cls, high_score: int, timestamp_ms: int) -> "Record":
        return cls(int(high_score), EPOCH + timedelta(milliseconds=int(timestamp_ms)))

    def to_dict(self) -> Dict[str, Any]:
        return {"high_score": self.high_score, "timestamp": self.timestamp_ms}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Record":
        return cls.from_millis(data.get("high_score", 0), data.get("timestamp", 0))
