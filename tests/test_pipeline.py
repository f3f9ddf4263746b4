"""End-to-end tests for the news → confirmation → paper trade pipeline."""

from __future__ import annotations

import csv
import logging
from datetime import timedelta
from typing import List

import pytest

from catalyst.core.config import AppConfig, Settings, SizingConfig
from catalyst.services.news.store import EventStore
from catalyst.services.runtime.pipeline import SignalPipeline, Watchlist

HEADLINE = "Company X Receives FDA Approval for Drug Y"


class Recorder:
    def __init__(self) -> None:
        self.messages: List[str] = []

    def __call__(self, text: str) -> bool:
        self.messages.append(text)
        return True


def _warm_bars(make_bar, symbol: str = "ACME", count: int = 10):
    return [make_bar(symbol, i, 10.0, 90.0 if i % 2 == 0 else 110.0) for i in range(count)]


def test_watchlist_basics() -> None:
    wl = Watchlist()
    assert wl.add("ACME") is True
    assert wl.add("ACME") is False
    assert "ACME" in wl
    assert len(wl) == 1
    assert wl.discard("ACME") is True
    assert wl.discard("ACME") is False
    assert wl.symbols() == []


def test_news_cycle_arms_symbol_and_alerts(make_item, t0) -> None:
    notify = Recorder()
    pipeline = SignalPipeline(notify=notify)
    armed = pipeline.news_cycle([make_item(HEADLINE, symbols=["ACME"])], now=t0)
    assert [a.item.primary_symbol for a in armed] == ["ACME"]
    assert "ACME" in pipeline.watchlist
    assert len(notify.messages) == 1
    assert notify.messages[0].startswith("NEWS ACME FDA_MARKETING_AUTH (score=")


def test_repeated_item_is_deduplicated(make_item, t0) -> None:
    notify = Recorder()
    pipeline = SignalPipeline(notify=notify)
    pipeline.news_cycle([make_item(HEADLINE, symbols=["ACME"])], now=t0)
    again = pipeline.news_cycle([make_item(HEADLINE, symbols=["ACME"])], now=t0)
    assert again == []
    assert len(notify.messages) == 1


def test_items_without_symbol_or_score_are_skipped(make_item, t0, caplog) -> None:
    pipeline = SignalPipeline(notify=Recorder())
    with caplog.at_level(logging.WARNING, logger="catalyst.runtime.pipeline"):
        armed = pipeline.news_cycle(
            [make_item(HEADLINE), make_item("Acme Hosts Quiet Day", symbols=["ACME"])],
            now=t0,
        )
    assert armed == []
    assert len(pipeline.watchlist) == 0
    assert any(r.getMessage() == "news.skip_no_symbol" for r in caplog.records)


def test_stale_items_fall_outside_lookback(make_item, t0) -> None:
    pipeline = SignalPipeline(notify=Recorder())
    stale = make_item(HEADLINE, symbols=["ACME"], published_at=(t0 - timedelta(days=1)).isoformat())
    assert pipeline.news_cycle([stale], now=t0) == []


def test_failing_notifier_does_not_break_cycle(make_item, t0) -> None:
    def boom(_text: str) -> bool:
        raise RuntimeError("webhook down")

    pipeline = SignalPipeline(notify=boom)
    armed = pipeline.news_cycle([make_item(HEADLINE, symbols=["ACME"])], now=t0)
    assert len(armed) == 1


def test_confirmed_entry_then_trailing_exit(make_item, make_bar, t0) -> None:
    notify = Recorder()
    pipeline = SignalPipeline(notify=notify)
    pipeline.news_cycle([make_item(HEADLINE, symbols=["ACME"])], now=t0)

    assert pipeline.run_bars(_warm_bars(make_bar)) == []
    fills = pipeline.on_bar(make_bar("ACME", 10, 10.3, 1_000.0))
    assert len(fills) == 1
    entry = fills[0]
    assert entry.side == "buy"
    assert entry.qty == 200
    assert entry.px == pytest.approx(10.31)
    assert "ACME" not in pipeline.watchlist
    assert pipeline.ledger.positions["ACME"].qty == 200

    exits = pipeline.on_bar(make_bar("ACME", 11, 8.5, 500.0))
    assert [f.reason for f in exits] == ["trail"]
    assert pipeline.ledger.positions == {}
    assert pipeline.ledger.realized_pnl == pytest.approx((8.5 - 10.31) * 200)
    assert any(m.startswith("SIM ENTRY ACME qty=200") for m in notify.messages)
    assert any(m.startswith("SIM EXIT ACME") for m in notify.messages)


def test_unwatched_symbol_never_enters(make_bar) -> None:
    pipeline = SignalPipeline(notify=Recorder())
    pipeline.run_bars(_warm_bars(make_bar))
    assert pipeline.on_bar(make_bar("ACME", 10, 10.3, 1_000.0)) == []
    assert pipeline.ledger.fills == []


def test_unsizable_entry_consumes_signal(make_item, make_bar, t0, caplog) -> None:
    config = AppConfig(sizing=SizingConfig(max_notional=1.0))
    pipeline = SignalPipeline(config, notify=Recorder())
    pipeline.news_cycle([make_item(HEADLINE, symbols=["ACME"])], now=t0)
    pipeline.run_bars(_warm_bars(make_bar))
    with caplog.at_level(logging.WARNING, logger="catalyst.runtime.pipeline"):
        assert pipeline.on_bar(make_bar("ACME", 10, 10.3, 1_000.0)) == []
    assert "ACME" not in pipeline.watchlist
    assert any(r.getMessage() == "sim.no_size" for r in caplog.records)


def test_malformed_bar_is_skipped(make_bar) -> None:
    pipeline = SignalPipeline(notify=Recorder())
    assert pipeline.on_bar(make_bar("ACME", 0, float("nan"), 100.0)) == []
    assert pipeline.market.window("ACME") is None


def test_flush_fills_writes_csv(make_item, make_bar, t0, tmp_path) -> None:
    pipeline = SignalPipeline(notify=Recorder())
    pipeline.news_cycle([make_item(HEADLINE, symbols=["ACME"])], now=t0)
    pipeline.run_bars(_warm_bars(make_bar) + [make_bar("ACME", 10, 10.3, 1_000.0)])
    path = pipeline.flush_fills(tmp_path / "out" / "fills.csv")
    with path.open(newline="", encoding="utf-8") as handle:
        rows = list(csv.DictReader(handle))
    assert len(rows) == 1
    assert rows[0]["symbol"] == "ACME"
    assert rows[0]["side"] == "buy"
    assert rows[0]["qty"] == "200"


def test_flush_fills_default_path_uses_fills_dir(tmp_path) -> None:
    config = AppConfig()
    config.settings.fills_dir = tmp_path / "logs"
    path = SignalPipeline(config, notify=Recorder()).flush_fills()
    assert path.parent == tmp_path / "logs"
    assert path.name.startswith("fills-")


def test_event_store_dedupes_across_pipelines(make_item, t0, tmp_path) -> None:
    store = EventStore(tmp_path / "events.db")
    first = SignalPipeline(store=store, notify=Recorder())
    assert len(first.news_cycle([make_item(HEADLINE, symbols=["ACME"])], now=t0)) == 1
    second = SignalPipeline(store=store, notify=Recorder())
    assert second.news_cycle([make_item(HEADLINE, symbols=["ACME"])], now=t0) == []
    assert store.count() == 1
    store.close()


def test_status_reports_counters(make_item, make_bar, t0) -> None:
    pipeline = SignalPipeline(notify=Recorder())
    pipeline.news_cycle([make_item(HEADLINE, symbols=["ACME"])], now=t0)
    pipeline.on_bar(make_bar("ACME", 0, 10.0, 100.0))
    status = pipeline.status()
    assert status["watchlist"] == ["ACME"]
    assert status["bars"] == 1
    assert status["entries"] == 0
    assert status["last_news_run"] == t0.isoformat()
    assert status["cash"] == pytest.approx(100_000)


def test_missing_title_does_not_break_news_cycle(make_item, t0) -> None:
    config = AppConfig(settings=Settings(alert_threshold=0.0))
    notify = Recorder()
    pipeline = SignalPipeline(config, notify=notify)
    items = [make_item(None, symbols=[]), make_item(None, symbols=["ACME"])]
    armed = pipeline.news_cycle(items, now=t0)
    assert [entry.item.primary_symbol for entry in armed] == ["ACME"]
    assert len(notify.messages) == 1
    assert notify.messages[0].startswith("NEWS ACME")


def test_gate_thresholds_come_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("VOL_Z_MIN", "3")
    pipeline = SignalPipeline(notify=Recorder())
    assert pipeline.market.config.vol_z_min == pytest.approx(3.0)


def test_binding_deal_with_conference_call_arms_symbol(make_item, t0) -> None:
    item = make_item(
        "Acme Enters Into Definitive Agreement to Be Acquired by Beta Corp for $12.50 per share in cash",
        summary="The companies will host a conference call at 8:30 a.m. ET to discuss the transaction.",
        symbols=["ACME"],
    )
    pipeline = SignalPipeline(notify=Recorder())
    armed = pipeline.news_cycle([item], now=t0)
    assert [entry.item.primary_symbol for entry in armed] == ["ACME"]
    assert "ACME" in pipeline.watchlist
