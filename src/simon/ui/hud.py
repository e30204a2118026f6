from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, Optional, Sequence, Tuple

from ..models import DEFAULT_PALETTE, GamePhase, SymbolSpec

if TYPE_CHECKING:
    from ..engine import SimonEngine

Color = Tuple[int, int, int]

TITLE = "Simon Kawaii"
TITLE_COLOR: Color = (244, 143, 177)
LEVEL_COLOR: Color = (236, 64, 122)
LABEL_COLOR: Color = (248, 187, 208)
TEXT_COLOR: Color = (128, 128, 128)
RECORD_COLOR: Color = (136, 136, 136)
CARD_COLOR: Color = (255, 255, 255)
START_COLOR: Color = (240, 98, 146)
DISABLED_COLOR: Color = (158, 158, 158)

PLAY_LABEL = "Play! 🌸"
RETRY_LABEL = "Try Again? 🥺"

# Keyboard shortcuts by key name: digits and a QW/AS block mirroring the grid.
KEY_BINDINGS: Dict[str, int] = {
    "KEY_1": 0,
    "KEY_2": 1,
    "KEY_3": 2,
    "KEY_4": 3,
    "Q": 0,
    "W": 1,
    "A": 2,
    "S": 3,
}


@dataclass(frozen=True)
class Rect:
    left: float
    bottom: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def top(self) -> float:
        return self.bottom + self.height

    @property
    def center(self) -> Tuple[float, float]:
        return (self.left + self.width / 2, self.bottom + self.height / 2)

    def contains(self, x: float, y: float) -> bool:
        return self.left <= x <= self.right and self.bottom <= y <= self.top


class HudModel:
    """Framework-free view model for the game screen.

    Derives every string, colour and rectangle the window draws from the
    engine state so layout and hit-testing can be tested without Arcade.
    Coordinates use a bottom-left origin like Arcade.
    """

    BUTTON_PAD = 16
    MAX_BUTTON = 140
    START_SIZE = (200, 56)

    def __init__(
        self,
        engine: "SimonEngine",
        width: int,
        height: int,
        palette: Sequence[SymbolSpec] = DEFAULT_PALETTE,
    ) -> None:
        self.engine = engine
        self.palette = tuple(palette)
        self.width = width
        self.height = height

    # Text

    def level_text(self) -> str:
        return str(max(0, self.engine.level))

    def message_text(self) -> str:
        return self.engine.message

    def record_line(self) -> Optional[str]:
        """Best score line, or None when there is no record yet."""
        record = self.engine.record
        if not record.is_set:
            return None
        when = record.achieved_at.astimezone().strftime("%d/%m/%y %H:%M")
        return f"🏆 Record: {record.high_score} ({when})"

    def start_label(self) -> str:
        return RETRY_LABEL if self.engine.phase is GamePhase.FAILED else PLAY_LABEL

    def start_enabled(self) -> bool:
        return self.engine.can_start

    def start_color(self) -> Color:
        return START_COLOR if self.start_enabled() else DISABLED_COLOR

    # Layout

    def button_size(self) -> float:
        return min((self.width - 3 * self.BUTTON_PAD) / 2, self.MAX_BUTTON)

    def start_rect(self) -> Rect:
        w, h = self.START_SIZE
        return Rect((self.width - w) / 2, 40, w, h)

    def button_rects(self) -> Dict[int, Rect]:
        size = self.button_size()
        pad = self.BUTTON_PAD
        grid = 2 * size + pad
        left = (self.width - grid) / 2
        bottom = self.start_rect().top + 48
        rects: Dict[int, Rect] = {}
        for spec in self.palette:
            row, col = divmod(spec.id, 2)
            x = left + col * (size + pad)
            # Row 0 is the top row.
            y = bottom + (1 - row) * (size + pad)
            rects[spec.id] = Rect(x, y, size, size)
        return rects

    def button_color(self, symbol: int) -> Color:
        spec = self.palette[symbol]
        return spec.active_color if self.engine.active_symbol == symbol else spec.color

    def buttons_enabled(self) -> bool:
        return self.engine.accepts_input

    # Hit-testing

    def symbol_at(self, x: float, y: float) -> Optional[int]:
        for symbol, rect in self.button_rects().items():
            if rect.contains(x, y):
                return symbol
        return None

    def start_hit(self, x: float, y: float) -> bool:
        return self.start_rect().contains(x, y)

    @staticmethod
    def symbol_for_key(key_name: str) -> Optional[int]:
        return KEY_BINDINGS.get(key_name.upper())
