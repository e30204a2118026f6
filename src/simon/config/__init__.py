from __future__ import annotations

import dataclasses
import logging
import os
from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

import yaml

from ..errors import ConfigError

logger = logging.getLogger(__name__)

STORAGE_BACKENDS = ("memory", "json", "sql")


def _as_bool(value: Any) -> bool:
    """Interpret common truthy/falsey values into a bool.

    Accepts: True/False, 1/0, "true"/"false", "yes"/"no", "on"/"off" (case-insensitive).
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    if isinstance(value, str):
        v = value.strip().lower()
        if v in {"1", "true", "yes", "y", "on"}:
            return True
        if v in {"0", "false", "no", "n", "off"}:
            return False
        raise ValueError(f"not a boolean: {value!r}")
    return bool(value)


def _clamp(value: float, min_value: float, max_value: float) -> float:
    return max(min_value, min(max_value, value))


def _coerce_fields(section: Any) -> None:
    """Cast each field to the type of its default; unusable values revert to the default.

    Booleans and optional (None-default) fields are left alone.
    """
    defaults = type(section)()
    for f in dataclasses.fields(section):
        default = getattr(defaults, f.name)
        if default is None or isinstance(default, bool):
            continue
        value = getattr(section, f.name)
        try:
            setattr(section, f.name, type(default)(value))
        except (TypeError, ValueError, OverflowError):
            logger.error("Invalid %s.%s=%r; using default %r", type(section).__name__, f.name, value, default)
            setattr(section, f.name, default)


@dataclass
class TimingSettings:
    """Presentation and round timing, in milliseconds."""

    lit_ms: int = 500
    gap_ms: int = 250
    pre_roll_ms: int = 1000
    settle_ms: int = 1000

    def validate(self) -> None:
        for f in dataclasses.fields(self):
            value = getattr(self, f.name)
            if value < 0:
                raise ValueError(f"{f.name} must be non-negative, got {value}")

    @property
    def lit(self) -> float:
        return self.lit_ms / 1000.0

    @property
    def gap(self) -> float:
        return self.gap_ms / 1000.0

    @property
    def pre_roll(self) -> float:
        return self.pre_roll_ms / 1000.0

    @property
    def settle(self) -> float:
        return self.settle_ms / 1000.0


@dataclass
class WindowSettings:
    width: int = 480
    height: int = 720
    title: str = "Simon Kawaii"
    background: str = "#FFF0F5"


@dataclass
class AudioSettings:
    enabled: bool = True
    sfx_volume: float = 0.8
    tone_ms: int = 150
    error_tone_ms: int = 500


@dataclass
class StorageSettings:
    backend: str = "sql"  # memory | json | sql
    path: Optional[str] = None


# env var -> (section, field, caster)
_ENV_OVERRIDES: Dict[str, Tuple[str, str, Callable[[Any], Any]]] = {
    "SIMON_LIT_MS": ("timing", "lit_ms", int),
    "SIMON_GAP_MS": ("timing", "gap_ms", int),
    "SIMON_PRE_ROLL_MS": ("timing", "pre_roll_ms", int),
    "SIMON_SETTLE_MS": ("timing", "settle_ms", int),
    "SIMON_WIDTH": ("window", "width", int),
    "SIMON_HEIGHT": ("window", "height", int),
    "SIMON_SFX_VOLUME": ("audio", "sfx_volume", float),
    "SIMON_MUTE": ("audio", "enabled", lambda v: not _as_bool(v)),
    "SIMON_STORE": ("storage", "backend", str),
    "SIMON_STORE_PATH": ("storage", "path", str),
}


@dataclass
class Settings:
    """Application settings.

    Sources, lowest to highest priority:
    - the packaged default_settings.yaml
    - an optional user YAML file (explicit path or SIMON_SETTINGS_FILE)
    - environment variables with the SIMON_ prefix
    """

    timing: TimingSettings = field(default_factory=TimingSettings)
    window: WindowSettings = field(default_factory=WindowSettings)
    audio: AudioSettings = field(default_factory=AudioSettings)
    storage: StorageSettings = field(default_factory=StorageSettings)

    @staticmethod
    def _load_yaml(path: Path) -> dict:
        try:
            with path.open("r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigError(f"Settings file {path} must contain a mapping at top level")
        return data

    @classmethod
    def _deep_merge(cls, base: dict, overlay: dict) -> dict:
        merged = dict(base)
        for k, v in (overlay or {}).items():
            if isinstance(v, dict) and isinstance(base.get(k), dict):
                merged[k] = cls._deep_merge(base[k], v)
            else:
                merged[k] = v
        return merged

    @staticmethod
    def _section(section_cls, data: Any):
        if not isinstance(data, dict):
            return section_cls()
        allowed = {f.name for f in dataclasses.fields(section_cls)}
        unknown = set(data) - allowed
        if unknown:
            logger.warning("Ignoring unknown %s keys: %s", section_cls.__name__, sorted(unknown))
        return section_cls(**{k: v for k, v in data.items() if k in allowed})

    @classmethod
    def from_dict(cls, data: dict) -> "Settings":
        settings = Settings(
            timing=cls._section(TimingSettings, data.get("timing")),
            window=cls._section(WindowSettings, data.get("window")),
            audio=cls._section(AudioSettings, data.get("audio")),
            storage=cls._section(StorageSettings, data.get("storage")),
        )
        settings.validate()
        return settings

    @staticmethod
    def env_overrides(env: Optional[Mapping[str, str]] = None) -> dict:
        env = os.environ if env is None else env
        out: Dict[str, Dict[str, Any]] = {}
        for env_key, (section, name, caster) in _ENV_OVERRIDES.items():
            raw = env.get(env_key)
            if raw is None or raw == "":
                continue
            try:
                out.setdefault(section, {})[name] = caster(raw)
            except ValueError as exc:
                logger.error("Invalid env for %s=%r: %s", env_key, raw, exc)
        return out

    @staticmethod
    def discover_config_path(env: Optional[Mapping[str, str]] = None) -> Optional[Path]:
        env = os.environ if env is None else env
        env_path = env.get("SIMON_SETTINGS_FILE")
        if env_path:
            return Path(env_path).expanduser()
        return None

    @classmethod
    def load(cls, user_path: Optional[Path] = None, env: Optional[Mapping[str, str]] = None) -> "Settings":
        """Load settings from built-in defaults, a user file and the environment."""
        try:
            with resources.files("simon.config").joinpath("default_settings.yaml").open("r", encoding="utf-8") as f:
                default_data = yaml.safe_load(f) or {}
        except FileNotFoundError:
            logger.warning("Default settings not found; falling back to dataclass defaults.")
            default_data = dataclasses.asdict(Settings())

        if user_path is None:
            user_path = cls.discover_config_path(env)

        user_data: dict = {}
        if user_path is not None:
            if user_path.exists():
                try:
                    user_data = cls._load_yaml(user_path)
                    logger.info("Loaded user settings from %s", user_path)
                except ConfigError as exc:
                    logger.error("%s; using defaults", exc)
            else:
                logger.warning("User settings file not found: %s", user_path)

        merged = cls._deep_merge(default_data, user_data)
        merged = cls._deep_merge(merged, cls.env_overrides(env))
        settings = cls.from_dict(merged)
        logger.debug("Settings merged: %s", settings)
        return settings

    def validate(self) -> None:
        for section in (self.timing, self.window, self.audio, self.storage):
            _coerce_fields(section)
        try:
            self.timing.validate()
        except ValueError as exc:
            logger.error("Invalid timing settings (%s); using defaults", exc)
            self.timing = TimingSettings()
        self.audio.sfx_volume = _clamp(self.audio.sfx_volume, 0.0, 1.0)
        try:
            self.audio.enabled = _as_bool(self.audio.enabled)
        except ValueError as exc:
            logger.error("Invalid audio.enabled (%s); keeping audio on", exc)
            self.audio.enabled = True
        if self.storage.backend not in STORAGE_BACKENDS:
            logger.warning("Unknown storage backend %r; using 'sql'", self.storage.backend)
            self.storage.backend = "sql"
        if self.window.width <= 0 or self.window.height <= 0:
            logger.warning("Invalid window size %sx%s; resetting to 480x720", self.window.width, self.window.height)
            self.window.width, self.window.height = 480, 720

    def as_dict(self) -> dict:
        return dataclasses.asdict(self)

    def save(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as f:
            yaml.safe_dump(self.as_dict(), f, sort_keys=False, allow_unicode=True)
        logger.info("Saved settings to %s", path)


__all__ = [
    "STORAGE_BACKENDS",
    "TimingSettings",
    "WindowSettings",
    "AudioSettings",
    "StorageSettings",
    "Settings",
]
