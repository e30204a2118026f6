"""
Simon Kawaii package root.

The game is split into a framework-free core (engine, scheduler, models,
persistence) and thin presentation layers (Arcade window, console runner)
that observe the engine through listeners.
"""

__version__ = "1.0.0"

__all__ = [
    "__version__",
    "engine",
    "persistence",
]
