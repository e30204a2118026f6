"""Presentation layer: the Arcade window and its framework-free HUD model."""

from .hud import HudModel, Rect

__all__ = ["HudModel", "Rect"]
