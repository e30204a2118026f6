from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from simon.config import Settings, TimingSettings, _as_bool


def test_defaults_come_from_packaged_yaml():
    settings = Settings.load(env={})
    assert settings.timing == TimingSettings(lit_ms=500, gap_ms=250, pre_roll_ms=1000, settle_ms=1000)
    assert settings.timing.lit == pytest.approx(0.5)
    assert settings.window.width == 480
    assert settings.window.height == 720
    assert settings.audio.enabled is True
    assert settings.storage.backend == "sql"
    assert settings.storage.path is None


def test_user_file_is_deep_merged(tmp_path: Path):
    user = tmp_path / "settings.yaml"
    user.write_text(yaml.safe_dump({"timing": {"lit_ms": 300}, "storage": {"backend": "json"}}), encoding="utf-8")

    settings = Settings.load(user_path=user, env={})
    assert settings.timing.lit_ms == 300
    assert settings.timing.gap_ms == 250
    assert settings.storage.backend == "json"


def test_settings_file_from_env(tmp_path: Path):
    user = tmp_path / "custom.yaml"
    user.write_text("window:\n  width: 600\n", encoding="utf-8")
    settings = Settings.load(env={"SIMON_SETTINGS_FILE": str(user)})
    assert settings.window.width == 600


def test_env_overrides_beat_user_file(tmp_path: Path):
    user = tmp_path / "settings.yaml"
    user.write_text("timing:\n  settle_ms: 700\n", encoding="utf-8")
    env = {
        "SIMON_SETTLE_MS": "50",
        "SIMON_STORE": "memory",
        "SIMON_STORE_PATH": "/tmp/x.db",
        "SIMON_MUTE": "yes",
        "SIMON_SFX_VOLUME": "0.25",
    }
    settings = Settings.load(user_path=user, env=env)
    assert settings.timing.settle_ms == 50
    assert settings.storage.backend == "memory"
    assert settings.storage.path == "/tmp/x.db"
    assert settings.audio.enabled is False
    assert settings.audio.sfx_volume == pytest.approx(0.25)


def test_invalid_env_values_are_ignored():
    settings = Settings.load(env={"SIMON_LIT_MS": "fast", "SIMON_MUTE": "maybe"})
    assert settings.timing.lit_ms == 500
    assert settings.audio.enabled is True


def test_invalid_yaml_falls_back_to_defaults(tmp_path: Path):
    user = tmp_path / "broken.yaml"
    user.write_text("timing: [unclosed", encoding="utf-8")
    settings = Settings.load(user_path=user, env={})
    assert settings.timing.lit_ms == 500


def test_negative_timing_is_reset_to_defaults():
    settings = Settings.load(env={"SIMON_GAP_MS": "-5"})
    assert settings.timing == TimingSettings()


def test_timing_validate_rejects_negative():
    with pytest.raises(ValueError):
        TimingSettings(lit_ms=-1).validate()


def test_validation_clamps_and_normalizes():
    settings = Settings.from_dict(
        {
            "audio": {"sfx_volume": 3.0, "enabled": "off"},
            "storage": {"backend": "mongo"},
            "window": {"width": 0, "height": 100, "bogus": 1},
        }
    )
    assert settings.audio.sfx_volume == 1.0
    assert settings.audio.enabled is False
    assert settings.storage.backend == "sql"
    assert (settings.window.width, settings.window.height) == (480, 720)


def test_save_round_trip(tmp_path: Path):
    settings = Settings.load(env={"SIMON_LIT_MS": "123"})
    out = tmp_path / "nested" / "settings.yaml"
    settings.save(out)
    assert Settings.load(user_path=out, env={}) == settings


@pytest.mark.parametrize(
    "raw, expected",
    [("1", True), ("TRUE", True), ("on", True), ("no", False), ("0", False), (0, False)],
)
def test_as_bool(raw, expected):
    assert _as_bool(raw) is expected


def test_as_bool_rejects_unknown():
    with pytest.raises(ValueError):
        _as_bool("perhaps")


def test_wrongly_typed_yaml_values_fall_back_to_defaults(tmp_path: Path):
    user = tmp_path / "settings.yaml"
    user.write_text(
        yaml.safe_dump(
            {
                "timing": {"lit_ms": "fast", "gap_ms": "120"},
                "audio": {"sfx_volume": "loud", "tone_ms": [1]},
                "window": {"width": "wide", "height": 800},
            }
        ),
        encoding="utf-8",
    )
    settings = Settings.load(user_path=user, env={})

    assert settings.timing.lit_ms == 500
    assert settings.timing.gap_ms == 120
    assert settings.audio.sfx_volume == pytest.approx(0.8)
    assert settings.audio.tone_ms == 150
    assert settings.window.width == 480
    assert settings.window.height == 800
