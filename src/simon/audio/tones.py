from __future__ import annotations

import array
import logging
import math
import wave
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Optional, Sequence

from ..config import AudioSettings
from ..events import GameEvent
from ..models import DEFAULT_PALETTE, SymbolSpec
from ..persistence.paths import cache_dir, ensure_dir

if TYPE_CHECKING:
    from ..engine import SimonEngine

logger = logging.getLogger(__name__)

SAMPLE_RATE = 44100
ERROR_FREQUENCY = 180.0
ERROR_KEY = "error"


def synthesize_tone(
    path: Path,
    frequency: float,
    duration_ms: int,
    sample_rate: int = SAMPLE_RATE,
    square: bool = False,
) -> Path:
    """Write a 16-bit mono PCM WAV holding a pure tone.

    A square wave is used for the game-over buzz so it reads as an error.
    """
    num_samples = max(1, duration_ms * sample_rate // 1000)
    period = sample_rate / frequency
    samples = array.array("h")
    for i in range(num_samples):
        value = math.sin(2.0 * math.pi * i / period)
        if square:
            value = 0.6 if value >= 0 else -0.6
        samples.append(int(value * 32767))
    ensure_dir(path.parent)
    with wave.open(str(path), "wb") as wav:
        wav.setnchannels(1)
        wav.setsampwidth(2)
        wav.setframerate(sample_rate)
        wav.writeframes(samples.tobytes())
    return path


@dataclass
class _SoundWrapper:
    """A thin wrapper around a backend sound object to normalize interface."""

    obj: Any

    def play(self, volume: float) -> None:
        self.obj.play(volume=volume)


class ToneBank:
    """Plays one tone per symbol and an error buzz on game over.

    Tones are synthesized into a cache directory on prepare() and loaded via
    an audio backend (Arcade by default, injectable for tests). Missing
    backends or playback faults are logged; play methods never raise and
    return False when nothing was played.
    """

    def __init__(
        self,
        palette: Sequence[SymbolSpec] = DEFAULT_PALETTE,
        settings: Optional[AudioSettings] = None,
        directory: Optional[Path] = None,
        backend: Optional[Any] = None,
    ) -> None:
        self.palette = tuple(palette)
        self.settings = settings or AudioSettings()
        self.directory = Path(directory) if directory is not None else cache_dir() / "tones"
        self._backend = backend
        self._sounds: Dict[str, _SoundWrapper] = {}

    @property
    def enabled(self) -> bool:
        return bool(self.settings.enabled)

    @property
    def loaded(self) -> int:
        return len(self._sounds)

    def prepare(self) -> int:
        """Synthesize and load every tone. Returns how many sounds are ready."""
        if not self.enabled:
            logger.debug("Tones: audio disabled; skipping synthesis")
            return 0
        backend = self._ensure_backend()
        if backend is None:
            logger.info("Tones: no audio backend available; running silent")
            return 0
        for spec in self.palette:
            name = f"tone_{spec.id}_{int(spec.frequency)}hz_{self.settings.tone_ms}ms.wav"
            self._load(str(spec.id), self.directory / name, spec.frequency, self.settings.tone_ms, False)
        name = f"error_{int(ERROR_FREQUENCY)}hz_{self.settings.error_tone_ms}ms.wav"
        self._load(ERROR_KEY, self.directory / name, ERROR_FREQUENCY, self.settings.error_tone_ms, True)
        logger.info("Tones: %d sounds ready in %s", len(self._sounds), self.directory)
        return len(self._sounds)

    def play_symbol(self, symbol: int) -> bool:
        return self._play(str(symbol))

    def play_error(self) -> bool:
        return self._play(ERROR_KEY)

    def attach(self, engine: "SimonEngine") -> None:
        """Play tones as the engine lights symbols and when a game is lost."""
        engine.add_listener(self._on_event)

    def _on_event(self, event: GameEvent, engine: "SimonEngine") -> None:
        if event is GameEvent.ACTIVE_SYMBOL_CHANGED and engine.active_symbol is not None:
            self.play_symbol(engine.active_symbol)
        elif event is GameEvent.GAME_OVER:
            self.play_error()

    def _play(self, key: str) -> bool:
        if not self.enabled:
            return False
        sound = self._sounds.get(key)
        if sound is None:
            logger.debug("Tones: no sound loaded for '%s'", key)
            return False
        try:
            sound.play(self.settings.sfx_volume)
            return True
        except Exception:  # noqa: BLE001
            logger.exception("Tones: backend raised while playing '%s'", key)
            return False

    def _load(self, key: str, path: Path, frequency: float, duration_ms: int, square: bool) -> None:
        try:
            if not path.exists():
                synthesize_tone(path, frequency, duration_ms, square=square)
            sound = self._backend.Sound(str(path), streaming=False)  # type: ignore[union-attr]
        except Exception:  # noqa: BLE001
            logger.exception("Tones: failed to prepare '%s' from %s", key, path)
            return
        self._sounds[key] = _SoundWrapper(sound)

    def _ensure_backend(self) -> Optional[Any]:
        if self._backend is not None:
            return self._backend
        # Lazy import arcade so headless runs never need an audio device.
        try:
            import importlib

            self._backend = importlib.import_module("arcade")
        except Exception:  # noqa: BLE001
            self._backend = None
            logger.debug("Tones: Arcade backend not available; running in silent mode")
        return self._backend
