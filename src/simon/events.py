from enum import Enum, auto


class GameEvent(Enum):
    """Events emitted by SimonEngine to notify UI or systems."""

    PHASE_CHANGED = auto()
    LEVEL_CHANGED = auto()
    MESSAGE_CHANGED = auto()
    ACTIVE_SYMBOL_CHANGED = auto()
    RECORD_CHANGED = auto()
    SEQUENCE_EXTENDED = auto()
    GAME_OVER = auto()
