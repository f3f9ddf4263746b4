"""Entry-point for catalyst command-line operations."""

from __future__ import annotations

import argparse
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

import orjson
from dotenv import load_dotenv

from catalyst.core.config import AppConfig, load_config, reset_settings_cache
from catalyst.core.logging import setup_logging
from catalyst.services.market.types import Bar
from catalyst.services.news.classifier import classify
from catalyst.services.news.fetchers import FmpPressReleaseFetcher, MarketauxFetcher
from catalyst.services.news.filters import parse_timestamp
from catalyst.services.news.scoring import score
from catalyst.services.news.store import EventStore
from catalyst.services.news.types import NewsItem
from catalyst.services.runtime.pipeline import SignalPipeline
from catalyst.services.sim.loader import load_bars, load_news


def _bootstrap(config_path: Optional[str]) -> AppConfig:
    load_dotenv(override=False)
    reset_settings_cache()
    config = load_config(config_path)
    setup_logging(config.settings.log_level)
    return config


def _print_json(payload: object) -> None:
    print(orjson.dumps(payload, option=orjson.OPT_INDENT_2, default=str).decode())


def _live_fetchers(config: AppConfig) -> list:
    settings = config.settings
    return [
        MarketauxFetcher(settings.marketaux_api_key, lookback_minutes=settings.news_lookback_minutes),
        FmpPressReleaseFetcher(settings.fmp_api_key),
    ]


def cmd_check(config_path: Optional[str] = None) -> int:
    config = _bootstrap(config_path)
    settings = config.settings
    providers = [name for name, key in (("marketaux", settings.marketaux_api_key), ("fmp", settings.fmp_api_key)) if key]
    if not providers:
        print("NOT READY: missing MARKETAUX_API_KEY and FMP_API_KEY")
        return 1
    print(f"READY providers={','.join(providers)} threshold={settings.alert_threshold:.2f}")
    return 0


def cmd_classify(text: str, url: Optional[str] = None, symbols: Sequence[str] = (), config_path: Optional[str] = None) -> int:
    _bootstrap(config_path)
    item = NewsItem(id="cli", title=text, url=url, symbols=[s.upper() for s in symbols])
    scored = score(classify(item))
    _print_json(
        {
            "class": scored.klass.value,
            "raw_score": scored.classified.raw_score,
            "score": round(scored.score, 4),
            "reasons": list(scored.classified.reasons),
            "features": scored.features,
        }
    )
    return 0


def cmd_news(config_path: Optional[str] = None) -> int:
    config = _bootstrap(config_path)
    pipeline = SignalPipeline(config, fetchers=_live_fetchers(config), store=EventStore(config.settings.db_path))
    armed = pipeline.news_cycle()
    _print_json(
        [
            {"symbol": s.item.primary_symbol, "class": s.klass.value, "score": round(s.score, 4), "title": s.item.title}
            for s in armed
        ]
    )
    return 0


def cmd_poll(iterations: int = 0, config_path: Optional[str] = None) -> int:
    config = _bootstrap(config_path)
    pipeline = SignalPipeline(config, fetchers=_live_fetchers(config), store=EventStore(config.settings.db_path))
    runs = 0
    try:
        while iterations <= 0 or runs < iterations:
            pipeline.news_cycle()
            runs += 1
            if iterations <= 0 or runs < iterations:
                time.sleep(config.settings.poll_news_seconds)
    except KeyboardInterrupt:  # pragma: no cover - manual interruption
        return 130
    return 0


def _news_before(items: List[NewsItem], ts: datetime) -> Iterable[NewsItem]:
    while items:
        published = parse_timestamp(items[0].published_at)
        if published is not None and published > ts:
            break
        yield items.pop(0)


def replay(pipeline: SignalPipeline, bars: Iterable[Bar], news: Sequence[NewsItem]) -> SignalPipeline:
    """Interleave ``news`` with ``bars`` by timestamp through ``pipeline``."""

    epoch = datetime.min

    def _key(item: NewsItem) -> datetime:
        ts = parse_timestamp(item.published_at)
        return ts.replace(tzinfo=None) if ts is not None else epoch

    pending = sorted(news, key=_key)
    for bar in bars:
        due = list(_news_before(pending, bar.ts))
        if due:
            pipeline.news_cycle(due, now=bar.ts)
        pipeline.on_bar(bar)
    return pipeline


def cmd_replay(bars_path: str, news_path: str, out_path: Optional[str], config_path: Optional[str] = None) -> int:
    config = _bootstrap(config_path)
    pipeline = SignalPipeline(config, notify=lambda _text: False)
    replay(pipeline, load_bars(bars_path), load_news(news_path))
    if out_path:
        pipeline.flush_fills(Path(out_path))
    _print_json(pipeline.status())
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="catalyst", description="News catalyst paper-trading CLI")
    parser.add_argument("--config", default=None, help="Optional YAML config overlay")
    sub = parser.add_subparsers(dest="cmd")

    sub.add_parser("check", help="Verify provider credentials are configured")

    classify_parser = sub.add_parser("classify", help="Classify and score a headline")
    classify_parser.add_argument("text", help="Headline text (title and summary)")
    classify_parser.add_argument("--url", default=None, help="Source URL used for wire detection")
    classify_parser.add_argument("--symbol", action="append", default=[], help="Ticker symbol (repeatable)")

    sub.add_parser("news", help="Run one live news cycle and print armed symbols")

    poll_parser = sub.add_parser("poll", help="Poll news every POLL_NEWS_SECONDS")
    poll_parser.add_argument("--iterations", type=int, default=0, help="Stop after N cycles (0 = forever)")

    replay_parser = sub.add_parser("replay", help="Replay recorded bars and news through the pipeline")
    replay_parser.add_argument("--bars", required=True, help="CSV with ts,symbol,open,high,low,close,volume")
    replay_parser.add_argument("--news", required=True, help="NDJSON news items")
    replay_parser.add_argument("--out", default=None, help="Write fills CSV to this path")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.cmd == "check":
        return cmd_check(args.config)
    if args.cmd == "classify":
        return cmd_classify(args.text, url=args.url, symbols=args.symbol, config_path=args.config)
    if args.cmd == "news":
        return cmd_news(args.config)
    if args.cmd == "poll":
        return cmd_poll(args.iterations, args.config)
    if args.cmd == "replay":
        return cmd_replay(args.bars, args.news, args.out, args.config)

    parser.print_help()
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    sys.exit(main())
