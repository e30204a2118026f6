from __future__ import annotations

import json
from pathlib import Path

import pytest

from conftest import ScriptedRNG, present
from simon.__main__ import main
from simon.app import AutoPlayer, run_headless
from simon.config import Settings
from simon.models import GamePhase


def _memory_settings() -> Settings:
    settings = Settings.load(env={})
    settings.storage.backend = "memory"
    return settings


def test_auto_player_errs_after_configured_rounds(make_engine):
    eng = make_engine(rng=ScriptedRNG([0, 1, 2]))
    player = AutoPlayer(eng, rounds=1)
    eng.start()
    present(eng)
    player.on_tick(0.0)
    assert eng.phase is GamePhase.IDLE

    eng.scheduler.advance(eng.timing.settle + 0.001)
    present(eng)
    player.on_tick(0.0)
    assert eng.phase is GamePhase.FAILED
    assert eng.terminal_level == 2


def test_auto_player_waits_while_presenting(engine):
    player = AutoPlayer(engine, rounds=5)
    engine.start()
    player.on_tick(0.0)
    assert engine.phase is GamePhase.PRESENTING
    assert engine.player_cursor == 0


def test_run_headless_fast_plays_one_game(capsys):
    code = run_headless(_memory_settings(), seed=1, rounds=2, fast=True)
    out = capsys.readouterr().out

    assert code == 0
    assert "Simon Kawaii (headless)" in out
    assert "Your Turn! ✨" in out
    assert "NEW RECORD! 🎉" in out
    assert "Game over at level 3 (record: 3)" in out


def test_run_headless_persists_record_to_json(tmp_path: Path, capsys):
    settings = _memory_settings()
    settings.storage.backend = "json"
    settings.storage.path = str(tmp_path / "simon_record.json")

    assert run_headless(settings, seed=5, rounds=1, fast=True) == 0
    data = json.loads((tmp_path / "simon_record.json").read_text(encoding="utf-8"))
    assert data["high_score"] == 2

    # A worse game keeps the stored record.
    assert run_headless(settings, seed=5, rounds=0, fast=True) == 0
    data = json.loads((tmp_path / "simon_record.json").read_text(encoding="utf-8"))
    assert data["high_score"] == 2
    assert "record: 2" in capsys.readouterr().out


def test_main_headless_with_sql_store(tmp_path: Path, monkeypatch, capsys):
    monkeypatch.setenv("SIMON_HEADLESS", "0")
    db = tmp_path / "record_simon.db"
    code = main(["--headless", "--fast", "--store", "sql", "--store-path", str(db), "--rounds", "0", "--seed", "3"])
    assert code == 0
    assert db.exists()
    assert "Game over at level 1 (record: 1)" in capsys.readouterr().out


def test_main_rejects_negative_rounds():
    with pytest.raises(SystemExit):
        main(["--headless", "--rounds", "-1"])
