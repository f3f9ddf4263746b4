"""Signal pipeline wiring news, market state and the paper ledger together."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Set

from catalyst.core.config import AppConfig
from catalyst.core.utils import safe_text
from catalyst.services.market.state import MarketState
from catalyst.services.market.types import Bar
from catalyst.services.news.classifier import classify_batch
from catalyst.services.news.fetchers import NewsFetcher, fetch_all
from catalyst.services.news.filters import within_lookback
from catalyst.services.news.scoring import score_batch
from catalyst.services.news.store import EventStore, make_hash
from catalyst.services.news.types import NewsItem, ScoredItem
from catalyst.services.ops.alerts import send_discord
from catalyst.services.policy.sizing import size_entry
from catalyst.services.sim.export import write_fills_csv
from catalyst.services.sim.ledger import Ledger
from catalyst.services.sim.types import Fill

log = logging.getLogger("catalyst.runtime.pipeline")

Notifier = Callable[[str], Any]


class Watchlist:
    """Symbols with an unconsumed news signal awaiting price confirmation."""

    def __init__(self) -> None:
        self._symbols: Set[str] = set()

    def __contains__(self, symbol: object) -> bool:
        return symbol in self._symbols

    def __len__(self) -> int:
        return len(self._symbols)

    def add(self, symbol: str) -> bool:
        if symbol in self._symbols:
            return False
        self._symbols.add(symbol)
        return True

    def discard(self, symbol: str) -> bool:
        if symbol not in self._symbols:
            return False
        self._symbols.remove(symbol)
        return True

    def symbols(self) -> List[str]:
        return sorted(self._symbols)


class SignalPipeline:
    """News → watchlist, bars → confirmation → sized paper entry → exits."""

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        *,
        fetchers: Sequence[NewsFetcher] = (),
        store: Optional[EventStore] = None,
        notify: Optional[Notifier] = None,
        ledger: Optional[Ledger] = None,
        market: Optional[MarketState] = None,
    ) -> None:
        self.config = config or AppConfig()
        settings = self.config.settings
        self.fetchers = list(fetchers)
        self.store = store
        self.notify: Notifier = notify or send_discord
        self.ledger = ledger or Ledger(settings.starting_cash, self.config.exits)
        self.market = market or MarketState(self.config.gate)
        self.watchlist = Watchlist()
        self._seen: Set[str] = set()
        self.bar_count = 0
        self.entry_count = 0
        self.last_news_run: Optional[datetime] = None
        self.last_bar_at: Optional[datetime] = None

    # ------------------------------------------------------------------
    def _already_seen(self, key: str) -> bool:
        if self.store is not None:
            return self.store.seen(key)
        return key in self._seen

    def _remember(self, scored: ScoredItem, key: str) -> None:
        if self.store is not None:
            self.store.save(scored, key)
        else:
            self._seen.add(key)

    def _alert(self, text: str) -> None:
        try:
            self.notify(text)
        except Exception:  # noqa: BLE001 - alerts must not break the loop
            log.exception("pipeline.alert_failed")

    # ------------------------------------------------------------------
    def news_cycle(
        self,
        items: Optional[Iterable[NewsItem]] = None,
        now: Optional[datetime] = None,
    ) -> List[ScoredItem]:
        """Run one news pass and return the items that armed a symbol."""

        settings = self.config.settings
        now = now or datetime.now(timezone.utc)
        self.last_news_run = now
        raw = list(items) if items is not None else fetch_all(self.fetchers, now)
        recent = within_lookback(raw, now, settings.news_lookback_minutes)
        scored = score_batch(classify_batch(recent))
        passed = [s for s in scored if s.score >= settings.alert_threshold]
        log.info(
            "news.cycle",
            extra={"raw": len(raw), "recent": len(recent), "passed": len(passed)},
        )

        armed: List[ScoredItem] = []
        for entry in passed:
            item = entry.item
            title = safe_text(item.title)
            symbol = item.primary_symbol
            if not symbol:
                log.warning("news.skip_no_symbol", extra={"title": title[:120]})
                continue
            key = make_hash(item)
            if self._already_seen(key):
                log.info("news.dedupe", extra={"symbol": symbol, "title": title[:100]})
                continue
            self._remember(entry, key)
            self.watchlist.add(symbol)
            armed.append(entry)
            log.info(
                "news.watchlist_add",
                extra={
                    "symbol": symbol,
                    "klass": entry.klass.value,
                    "score": round(entry.score, 2),
                    "watchlist_size": len(self.watchlist),
                    "url": item.url or "",
                },
            )
            self._alert(f"NEWS {symbol} {entry.klass.value} (score={entry.score:.2f})\n{title}\n{item.url or ''}")
        return armed

    def on_bar(self, bar: Bar) -> List[Fill]:
        """Fold ``bar`` into market state and act on exits and confirmations."""

        self.bar_count += 1
        self.last_bar_at = bar.ts
        fills: List[Fill] = []
        if not self.market.on_bar(bar.symbol, bar.close, bar.volume, ts=bar.ts, reference=bar.open):
            return fills

        exit_fill = self.ledger.try_exit(bar.symbol, bar.close, bar.ts)
        if exit_fill is not None:
            fills.append(exit_fill)
            log.info(
                "sim.exit",
                extra={"symbol": bar.symbol, "px": exit_fill.px, "qty": exit_fill.qty, "reason": exit_fill.reason},
            )
            self._alert(f"SIM EXIT {bar.symbol} qty={exit_fill.qty} @ {exit_fill.px:.2f} ({exit_fill.reason})")

        if bar.symbol not in self.watchlist:
            return fills

        signal = self.market.confirm(bar.symbol, bar.close)
        log.info(
            "bar.confirm",
            extra={
                "symbol": bar.symbol,
                "price": bar.close,
                "vol_z": round(signal.vol_z, 2),
                "ret_1m": round(signal.ret_1m, 4),
                "vwap_dev": round(signal.vwap_dev, 4),
                "passed": signal.passed,
            },
        )
        if not signal.passed:
            return fills

        settings = self.config.settings
        order = size_entry(
            bar.symbol,
            bar.close,
            bar.ts,
            risk_pct=settings.risk_pct,
            equity=settings.sizing_equity,
            config=self.config.sizing,
        )
        self.watchlist.discard(bar.symbol)
        if order.qty <= 0:
            log.warning("sim.no_size", extra={"symbol": bar.symbol, "price": bar.close})
            return fills

        entry_fill = self.ledger.fill(order)
        if entry_fill is None:
            return fills
        fills.append(entry_fill)
        self.entry_count += 1
        log.info(
            "sim.entry",
            extra={
                "symbol": bar.symbol,
                "qty": order.qty,
                "px": order.px,
                "vol_z": round(signal.vol_z, 2),
                "ret_1m": round(signal.ret_1m, 4),
                "entries": self.entry_count,
            },
        )
        self._alert(
            f"SIM ENTRY {bar.symbol} qty={order.qty} @ {order.px:.2f} | "
            f"volZ={signal.vol_z:.2f} ret1m={signal.ret_1m * 100:.1f}%"
        )
        return fills

    def run_bars(self, bars: Iterable[Bar]) -> List[Fill]:
        fills: List[Fill] = []
        for bar in bars:
            fills.extend(self.on_bar(bar))
        return fills

    def flush_fills(self, path: Optional[Path | str] = None) -> Path:
        if path is None:
            day = datetime.now(timezone.utc).date().isoformat()
            path = Path(self.config.settings.fills_dir) / f"fills-{day}.csv"
        target = write_fills_csv(self.ledger.dump_fills(), path)
        log.info("sim.fills_flushed", extra={"path": str(target), "fills": len(self.ledger.dump_fills())})
        return target

    def status(self) -> Dict[str, Any]:
        return {
            "watchlist": self.watchlist.symbols(),
            "positions": {s: {"qty": p.qty, "avg": p.avg, "high": p.high} for s, p in self.ledger.positions.items()},
            "cash": self.ledger.cash,
            "realized_pnl": self.ledger.realized_pnl,
            "fills": len(self.ledger.dump_fills()),
            "bars": self.bar_count,
            "entries": self.entry_count,
            "last_news_run": self.last_news_run.isoformat() if self.last_news_run else None,
            "last_bar_at": self.last_bar_at.isoformat() if self.last_bar_at else None,
        }


__all__ = ["SignalPipeline", "Watchlist"]
