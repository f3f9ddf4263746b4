"""Tests for rolling statistics and the confirmation gate."""

from __future__ import annotations

import math
from datetime import timedelta

import pytest

from catalyst.core.config import GateConfig
from catalyst.services.market.indicators import RollingWindow, VwapAccumulator
from catalyst.services.market.state import MarketState


def test_window_never_exceeds_capacity() -> None:
    window = RollingWindow(3)
    for value in (1.0, 2.0, 3.0, 4.0):
        window.push(value)
    assert len(window) == 3
    assert 1.0 not in window.values
    assert window.mean() == pytest.approx(3.0)


def test_window_uses_sample_stdev() -> None:
    window = RollingWindow(10)
    for value in (2, 4, 4, 4, 5, 5, 7, 9):
        window.push(float(value))
    assert window.std() == pytest.approx(math.sqrt(32 / 7))


def test_zscore_is_zero_for_flat_or_empty_window() -> None:
    window = RollingWindow(5)
    assert window.zscore() == 0.0
    for _ in range(5):
        window.push(100.0)
    assert window.zscore() == 0.0


def test_window_rejects_non_positive_capacity() -> None:
    with pytest.raises(ValueError):
        RollingWindow(0)


def test_vwap_falls_back_without_volume() -> None:
    acc = VwapAccumulator()
    assert acc.vwap(12.5) == 12.5
    acc.update(10.0, 100)
    acc.update(12.0, 300)
    assert acc.vwap(0.0) == pytest.approx(11.5)


def test_confirm_with_zero_volume_has_no_vwap_deviation() -> None:
    state = MarketState()
    assert state.on_bar("ZERO", 10.0, 0)
    signal = state.confirm("ZERO", 11.0)
    assert signal.vwap_dev == 0.0
    assert signal.ret_1m == pytest.approx(0.1)
    assert signal.passed is False


def test_confirm_cold_symbol_returns_neutral_signal() -> None:
    signal = MarketState().confirm("NEW", 5.0)
    assert (signal.vol_z, signal.ret_1m, signal.vwap_dev) == (0.0, 0.0, 0.0)
    assert signal.passed is False


def _warm(state: MarketState, symbol: str, bars: int = 10) -> None:
    for i in range(bars):
        state.on_bar(symbol, 10.0, 90.0 if i % 2 == 0 else 110.0)


def test_volume_spike_with_return_passes() -> None:
    state = MarketState()
    _warm(state, "ACME")
    state.on_bar("ACME", 10.3, 1_000.0)
    signal = state.confirm("ACME", 10.3)
    assert signal.vol_z >= 2.0
    assert signal.ret_1m == pytest.approx(0.03)
    assert signal.passed is True


def test_move_on_dead_volume_never_passes() -> None:
    state = MarketState()
    _warm(state, "ACME")
    state.on_bar("ACME", 12.0, 100.0)
    signal = state.confirm("ACME", 12.0)
    assert signal.ret_1m > 0.1
    assert signal.vwap_dev > 0.01
    assert signal.vol_z < 1.5
    assert signal.passed is False


def test_vwap_led_move_passes_with_mild_volume() -> None:
    state = MarketState(GateConfig(vol_z_min=2.0, ret_1m_min=0.50, vwap_dev_min=0.01))
    _warm(state, "ACME")
    state.on_bar("ACME", 10.3, 1_000.0)
    signal = state.confirm("ACME", 10.3)
    assert signal.ret_1m < 0.50
    assert signal.vwap_dev >= 0.01
    assert signal.passed is True


def test_reference_price_is_set_once() -> None:
    state = MarketState()
    state.on_bar("ACME", 10.0, 100.0, reference=9.5)
    state.on_bar("ACME", 11.0, 100.0, reference=20.0)
    assert state.reference_price("ACME") == 9.5
    assert state.set_reference_price("ACME", 30.0) is False
    assert state.reference_price("ACME") == 9.5


def test_reset_symbol_is_safe_and_clears_state() -> None:
    state = MarketState()
    state.reset_symbol("NEVER_SEEN")
    _warm(state, "ACME")
    state.reset_symbol("ACME")
    assert state.window("ACME") is None
    assert state.reference_price("ACME") is None
    assert "ACME" not in state.symbols()


def test_session_rollover_resets_statistics(t0) -> None:
    state = MarketState()
    state.on_bar("ACME", 10.0, 100.0, ts=t0)
    state.on_bar("ACME", 10.5, 120.0, ts=t0 + timedelta(minutes=1))
    assert len(state.window("ACME")) == 2
    state.on_bar("ACME", 20.0, 50.0, ts=t0 + timedelta(days=1))
    assert len(state.window("ACME")) == 1
    assert state.reference_price("ACME") == 20.0


def test_late_bar_from_previous_session_is_ignored(t0) -> None:
    state = MarketState()
    day2 = t0 + timedelta(days=1)
    for i in range(5):
        assert state.on_bar("ACME", 20.0 + i * 0.1, 100.0, ts=day2 + timedelta(minutes=i))
    assert state.on_bar("ACME", 9.0, 5_000.0, ts=t0 + timedelta(minutes=30)) is False
    assert len(state.window("ACME")) == 5
    assert state.reference_price("ACME") == 20.0

    assert state.on_bar("ACME", 20.6, 100.0, ts=day2 + timedelta(minutes=6))
    assert len(state.window("ACME")) == 6
    assert state.reference_price("ACME") == 20.0


def test_out_of_order_bar_within_session_is_folded_in(t0) -> None:
    state = MarketState()
    state.on_bar("ACME", 10.0, 100.0, ts=t0 + timedelta(minutes=5))
    assert state.on_bar("ACME", 10.2, 120.0, ts=t0 + timedelta(minutes=2))
    assert len(state.window("ACME")) == 2
    assert state.reference_price("ACME") == 10.0


def test_duplicate_bar_is_counted_twice(t0) -> None:
    state = MarketState()
    assert state.on_bar("ACME", 10.0, 100.0, ts=t0)
    assert state.on_bar("ACME", 10.0, 100.0, ts=t0)
    assert len(state.window("ACME")) == 2
    assert state.vwap("ACME", 0.0) == pytest.approx(10.0)


def test_malformed_bars_are_ignored() -> None:
    state = MarketState()
    assert state.on_bar("ACME", float("nan"), 100.0) is False
    assert state.on_bar("ACME", 10.0, -5.0) is False
    assert state.on_bar("ACME", 0.0, 100.0) is False
    assert state.window("ACME") is None


def test_window_capacity_follows_config() -> None:
    state = MarketState(GateConfig(window_size=5))
    _warm(state, "ACME", bars=12)
    assert len(state.window("ACME")) == 5


def test_reset_clears_every_symbol() -> None:
    state = MarketState()
    _warm(state, "ACME")
    _warm(state, "BETA")
    state.reset()
    assert state.symbols() == []
    assert state.confirm("ACME", 10.0).vol_z == 0.0
