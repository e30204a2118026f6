from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, List, Optional, Tuple

from .config import TimingSettings
from .errors import StorageError
from .events import GameEvent
from .models import SYMBOL_COUNT, GamePhase, Record, utc_now
from .persistence import InMemoryRecordStore, RecordStore
from .rng import SequenceRNG
from .scheduler import Scheduler, TimerHandle

logger = logging.getLogger(__name__)

Listener = Callable[[GameEvent, "SimonEngine"], None]

MSG_START = "Start! ✨"
MSG_MEMORIZE = "Memorize... 💭"
MSG_WATCH = "Watch... 👀"
MSG_YOUR_TURN = "Your Turn! ✨"
MSG_PERFECT = "Perfect! 💖"
MSG_GAME_OVER = "Oh no! 💔 Lvl: {level}"
MSG_NEW_RECORD = "NEW RECORD! 🎉"
MSG_SAVE_FAILED = "Record could not be saved 💾"
MSG_NEVER = "Never"


@dataclass(frozen=True)
class GameView:
    """Immutable snapshot of everything a renderer needs."""

    phase: GamePhase
    level: int
    message: str
    active_symbol: Optional[int]
    record: Record
    sequence_length: int
    player_cursor: int


class SimonEngine:
    """The memory-sequence state machine.

    Owns the sequence, the phase, the level counter and the cached best
    record. Every wait (presentation timing, the pause after a completed
    round, input feedback) is a timer on the injected Scheduler, so the engine
    never blocks and only one protocol step runs at a time.

    Listeners receive ``(event, engine)`` after each observable change.
    """

    def __init__(
        self,
        store: Optional[RecordStore] = None,
        timing: Optional[TimingSettings] = None,
        scheduler: Optional[Scheduler] = None,
        rng: Optional[SequenceRNG] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._store: RecordStore = store if store is not None else InMemoryRecordStore()
        self.timing = timing or TimingSettings()
        self.timing.validate()
        self.scheduler = scheduler or Scheduler()
        self._rng = rng or SequenceRNG()
        self._clock = clock or utc_now
        self._listeners: List[Listener] = []

        self._phase = GamePhase.IDLE
        self._level = 0
        self._message = MSG_START
        self._active_symbol: Optional[int] = None
        self._sequence: List[int] = []
        self._cursor = 0
        self._terminal_level: Optional[int] = None

        # At most one protocol step (presentation or round settle) is pending.
        self._protocol_timer: Optional[TimerHandle] = None
        self._feedback_timer: Optional[TimerHandle] = None

        self._record = self._load_record()
        self._message = self._idle_message()
        logger.info("SimonEngine ready (record=%d)", self._record.high_score)

    # ------------------------------------------------------------------
    # Observers

    def add_listener(self, listener: Listener) -> None:
        """Subscribe to game events."""
        self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _emit(self, event: GameEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event, self)
            except Exception as ex:
                logger.exception("Listener errored on %s: %s", event, ex)

    @property
    def phase(self) -> GamePhase:
        return self._phase

    @property
    def level(self) -> int:
        return self._level

    @property
    def message(self) -> str:
        return self._message

    @property
    def active_symbol(self) -> Optional[int]:
        return self._active_symbol

    @property
    def record(self) -> Record:
        return self._record

    @property
    def sequence(self) -> Tuple[int, ...]:
        return tuple(self._sequence)

    @property
    def player_cursor(self) -> int:
        return self._cursor

    @property
    def terminal_level(self) -> Optional[int]:
        """Level at which the last game ended, or None while no game has ended."""
        return self._terminal_level

    @property
    def accepts_input(self) -> bool:
        return self._phase is GamePhase.AWAITING_INPUT

    @property
    def can_start(self) -> bool:
        return self._phase is not GamePhase.PRESENTING

    def snapshot(self) -> GameView:
        return GameView(
            phase=self._phase,
            level=self._level,
            message=self._message,
            active_symbol=self._active_symbol,
            record=self._record,
            sequence_length=len(self._sequence),
            player_cursor=self._cursor,
        )

    # ------------------------------------------------------------------
    # Inbound calls

    def start(self) -> None:
        """Start a new game. Ignored while the sequence is being presented."""
        if self._phase is GamePhase.PRESENTING:
            logger.debug("start() ignored while presenting")
            return
        self._cancel_timers()
        self._sequence.clear()
        self._cursor = 0
        self._terminal_level = None
        self._set_active(None)
        self._append_symbol()
        self._set_message(MSG_MEMORIZE)
        logger.info("New game started")
        self._present()

    def submit_input(self, symbol: Any) -> None:
        """Handle the player pressing ``symbol``.

        Ignored unless the engine is awaiting input and symbol is a valid id.
        """
        if self._phase is not GamePhase.AWAITING_INPUT:
            logger.debug("Input %r ignored in phase %s", symbol, self._phase.value)
            return
        if isinstance(symbol, bool) or not isinstance(symbol, int) or not 0 <= symbol < SYMBOL_COUNT:
            logger.debug("Input %r ignored: not a symbol id", symbol)
            return

        self._flash_feedback(symbol)

        if symbol != self._sequence[self._cursor]:
            self._fail()
            return

        self._cursor += 1
        if self._cursor == len(self._sequence):
            logger.debug("Round %d complete", self._level)
            self._set_phase(GamePhase.IDLE)
            self._set_message(MSG_PERFECT)
            self._protocol_timer = self.scheduler.call_later(self.timing.settle, self._next_round)

    # ------------------------------------------------------------------
    # Round protocol

    def _next_round(self) -> None:
        self._protocol_timer = None
        self._cursor = 0
        self._append_symbol()
        self._present()

    def _append_symbol(self) -> None:
        symbol = self._rng.next_symbol()
        self._sequence.append(symbol)
        self._set_level(len(self._sequence))
        self._emit(GameEvent.SEQUENCE_EXTENDED)

    def _present(self) -> None:
        self._cancel_feedback()
        self._set_active(None)
        self._set_phase(GamePhase.PRESENTING)
        self._set_message(MSG_WATCH)
        self._protocol_timer = self.scheduler.call_later(self.timing.pre_roll, self._show_symbol, 0)

    def _show_symbol(self, index: int) -> None:
        if index >= len(self._sequence):
            self._protocol_timer = None
            self._set_phase(GamePhase.AWAITING_INPUT)
            self._set_message(MSG_YOUR_TURN)
            return
        self._set_active(self._sequence[index])
        self._protocol_timer = self.scheduler.call_later(self.timing.lit, self._hide_symbol, index)

    def _hide_symbol(self, index: int) -> None:
        self._set_active(None)
        self._protocol_timer = self.scheduler.call_later(self.timing.gap, self._show_symbol, index + 1)

    def _flash_feedback(self, symbol: int) -> None:
        self._cancel_feedback()
        if self._active_symbol == symbol:
            # Re-trigger so observers replay the highlight and tone.
            self._set_active(None)
        self._set_active(symbol)
        self._feedback_timer = self.scheduler.call_later(self.timing.lit, self._clear_feedback)

    def _clear_feedback(self) -> None:
        self._feedback_timer = None
        self._set_active(None)

    def _fail(self) -> None:
        level = len(self._sequence)
        self._terminal_level = level
        self._set_phase(GamePhase.FAILED)
        self._set_message(MSG_GAME_OVER.format(level=level))
        logger.info("Game over at level %d (cursor=%d)", level, self._cursor)
        self._emit(GameEvent.GAME_OVER)
        self._check_record(level)

    # ------------------------------------------------------------------
    # Records

    def _load_record(self) -> Record:
        try:
            return self._store.load()
        except Exception as exc:
            logger.warning("Record store failed to load; using default record: %s", exc)
            return Record()

    def _check_record(self, level: int) -> None:
        if level <= self._record.high_score:
            logger.debug("Level %d does not beat record %d", level, self._record.high_score)
            return
        candidate = Record(level, self._clock())
        try:
            self._store.save(candidate)
        except StorageError as exc:
            logger.warning("Could not save new record %d: %s", level, exc)
            self._set_message(f"{self._message}\n{MSG_SAVE_FAILED}")
            return
        except Exception as exc:
            logger.exception("Unexpected error while saving record %d: %s", level, exc)
            self._set_message(f"{self._message}\n{MSG_SAVE_FAILED}")
            return
        logger.info("New record: %d", level)
        self._record = candidate
        self._emit(GameEvent.RECORD_CHANGED)
        self._set_message(f"{self._message}\n{MSG_NEW_RECORD}")

    def _idle_message(self) -> str:
        record = self._record
        if record.is_set:
            when = record.achieved_at.astimezone().strftime("%d/%m %H:%M")
        else:
            when = MSG_NEVER
        return f"{MSG_START}\nRecord: {record.high_score} ({when})"

    # ------------------------------------------------------------------
    # State setters

    def _set_phase(self, phase: GamePhase) -> None:
        if phase is self._phase:
            return
        logger.debug("Phase %s -> %s", self._phase.value, phase.value)
        self._phase = phase
        self._emit(GameEvent.PHASE_CHANGED)

    def _set_level(self, level: int) -> None:
        if level == self._level:
            return
        self._level = level
        self._emit(GameEvent.LEVEL_CHANGED)

    def _set_message(self, message: str) -> None:
        if message == self._message:
            return
        self._message = message
        self._emit(GameEvent.MESSAGE_CHANGED)

    def _set_active(self, symbol: Optional[int]) -> None:
        if symbol == self._active_symbol:
            return
        self._active_symbol = symbol
        self._emit(GameEvent.ACTIVE_SYMBOL_CHANGED)

    def _cancel_feedback(self) -> None:
        if self._feedback_timer is not None:
            self._feedback_timer.cancel()
            self._feedback_timer = None

    def _cancel_timers(self) -> None:
        self._cancel_feedback()
        if self._protocol_timer is not None:
            self._protocol_timer.cancel()
            self._protocol_timer = None
