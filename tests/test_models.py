from __future__ import annotations

from datetime import datetime, timezone

import pytest

from simon.models import DEFAULT_PALETTE, EPOCH, SYMBOL_COUNT, GamePhase, Record, hex_to_rgb
from simon.rng import SequenceRNG


def test_default_record_is_empty():
    rec = Record()
    assert rec.high_score == 0
    assert rec.achieved_at == EPOCH
    assert rec.is_set is False
    assert rec.timestamp_ms == 0


def test_record_rejects_negative_score():
    with pytest.raises(ValueError):
        Record(-1)


def test_record_truncates_to_millis_and_assumes_utc():
    rec = Record(3, datetime(2024, 1, 1, 8, 0, 0, 123456))
    assert rec.achieved_at == datetime(2024, 1, 1, 8, 0, 0, 123000, tzinfo=timezone.utc)
    assert Record.from_millis(3, rec.timestamp_ms) == rec


def test_record_dict_layout():
    rec = Record.from_millis(5, 1_700_000_000_123)
    assert rec.to_dict() == {"high_score": 5, "timestamp": 1_700_000_000_123}
    assert Record.from_dict({}) == Record()


def test_palette_matches_alphabet():
    assert len(DEFAULT_PALETTE) == SYMBOL_COUNT
    assert [spec.id for spec in DEFAULT_PALETTE] == list(range(SYMBOL_COUNT))
    assert [spec.frequency for spec in DEFAULT_PALETTE] == [329.63, 440.00, 554.37, 659.25]
    assert DEFAULT_PALETTE[1].color == hex_to_rgb("#F472B6") == (244, 114, 182)


def test_phase_values_are_strings():
    assert GamePhase.AWAITING_INPUT.value == "awaiting_input"
    assert GamePhase("failed") is GamePhase.FAILED


def test_rng_is_reproducible_and_in_range():
    a = SequenceRNG(seed=42)
    b = SequenceRNG(seed=42)
    draws = [a.next_symbol() for _ in range(200)]
    assert draws == [b.next_symbol() for _ in range(200)]
    assert set(draws) <= set(range(SYMBOL_COUNT))


def test_rng_state_round_trip():
    rng = SequenceRNG(seed=7)
    state = rng.state()
    first = [rng.next_symbol() for _ in range(10)]
    rng.set_state(state)
    assert [rng.next_symbol() for _ in range(10)] == first


def test_rng_rejects_empty_alphabet():
    with pytest.raises(ValueError):
        SequenceRNG(symbol_count=0)
