from __future__ import annotations

import logging
from typing import Dict, Optional

try:
    import arcade  # type: ignore
except Exception:  # pragma: no cover - optional for test envs
    arcade = None

from ..config import WindowSettings
from ..engine import SimonEngine
from ..events import GameEvent
from ..models import hex_to_rgb
from .hud import (
    CARD_COLOR,
    KEY_BINDINGS,
    LABEL_COLOR,
    LEVEL_COLOR,
    RECORD_COLOR,
    TEXT_COLOR,
    TITLE_COLOR,
    HudModel,
    Rect,
)

logger = logging.getLogger(__name__)

_WindowBase = arcade.Window if arcade is not None else object


class SimonWindow(_WindowBase):  # type: ignore[misc, valid-type]
    """Arcade window for the game screen.

    Draws whatever the HudModel derives, forwards clicks and key presses to
    the engine and advances the engine's scheduler on every update.
    """

    def __init__(self, engine: SimonEngine, settings: Optional[WindowSettings] = None) -> None:
        if arcade is None:
            raise RuntimeError("Arcade package is not installed; cannot create window")
        settings = settings or WindowSettings()
        super().__init__(settings.width, settings.height, title=settings.title)
        self.background_color = hex_to_rgb(settings.background)
        self._title = settings.title
        self.engine = engine
        self.hud = HudModel(engine, settings.width, settings.height)
        self._keys: Dict[int, int] = {
            getattr(arcade.key, name): symbol for name, symbol in KEY_BINDINGS.items()
        }
        engine.add_listener(self._on_event)
        logger.info("Arcade window initialized (%dx%d)", settings.width, settings.height)

    def _on_event(self, event: GameEvent, engine: SimonEngine) -> None:
        if event is GameEvent.LEVEL_CHANGED:
            self.set_caption(f"{self._title} - Lvl {engine.level}")

    def on_draw(self) -> None:
        self.clear()
        hud = self.hud
        cx = self.width / 2

        arcade.draw_text(self._title, cx, self.height - 60, TITLE_COLOR, 30, anchor_x="center")
        card = Rect(cx - 110, self.height - 180, 220, 96)
        self._fill(card, CARD_COLOR)
        arcade.draw_text("LEVEL", cx, card.top - 28, LABEL_COLOR, 12, anchor_x="center", bold=True)
        arcade.draw_text(hud.level_text(), cx, card.bottom + 14, LEVEL_COLOR, 36, anchor_x="center", bold=True)

        record = hud.record_line()
        if record is not None:
            arcade.draw_text(record, cx, card.bottom - 28, RECORD_COLOR, 12, anchor_x="center")

        arcade.draw_text(
            hud.message_text(),
            cx,
            card.bottom - 60,
            TEXT_COLOR,
            16,
            anchor_x="center",
            anchor_y="top",
            multiline=True,
            width=self.width - 40,
            align="center",
        )

        for spec in hud.palette:
            rect = hud.button_rects()[spec.id]
            self._fill(rect, hud.button_color(spec.id))
            x, y = rect.center
            arcade.draw_text(spec.label, x, y, (255, 255, 255), 28, anchor_x="center", anchor_y="center")

        start = hud.start_rect()
        self._fill(start, hud.start_color())
        sx, sy = start.center
        arcade.draw_text(hud.start_label(), sx, sy, (255, 255, 255), 18, anchor_x="center", anchor_y="center")

    def on_update(self, delta_time: float) -> None:
        self.engine.scheduler.advance(delta_time)

    def on_mouse_press(self, x: float, y: float, button: int, modifiers: int) -> None:
        if self.hud.start_hit(x, y):
            if self.hud.start_enabled():
                self.engine.start()
            return
        symbol = self.hud.symbol_at(x, y)
        if symbol is not None:
            self.engine.submit_input(symbol)

    def on_key_press(self, symbol: int, modifiers: int) -> None:
        if symbol == arcade.key.ESCAPE:
            self.close()
        elif symbol in (arcade.key.ENTER, arcade.key.SPACE):
            self.engine.start()
        elif symbol in self._keys:
            self.engine.submit_input(self._keys[symbol])

    @staticmethod
    def _fill(rect: Rect, color) -> None:
        arcade.draw_lrbt_rectangle_filled(rect.left, rect.right, rect.bottom, rect.top, color)

