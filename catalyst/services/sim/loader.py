"""Load recorded bars and news for offline replays."""

from __future__ import annotations

import csv
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, List, Optional, Set

from catalyst.core.utils import finite_float
from catalyst.services.market.types import Bar
from catalyst.services.news.filters import parse_timestamp
from catalyst.services.news.types import NewsItem

log = logging.getLogger("catalyst.sim.loader")


def _parse_bar_ts(value: str) -> Optional[datetime]:
    num = finite_float(value)
    if num is not None:
        # epoch seconds, or milliseconds as emitted by aggregate feeds
        seconds = num / 1000.0 if num > 1e11 else num
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    return parse_timestamp(value)


def load_bars(
    csv_path: Path | str,
    symbols: Optional[Set[str]] = None,
    max_rows: Optional[int] = None,
) -> Iterator[Bar]:
    """Yield bars from a ``ts,symbol,open,high,low,close,volume`` CSV.

    Rows that cannot be parsed are skipped.
    """

    wanted = {s.upper() for s in symbols} if symbols else None
    with open(csv_path, "r", encoding="utf-8", newline="") as handle:
        reader = csv.DictReader(handle)
        count = 0
        for line_no, row in enumerate(reader, start=2):
            if max_rows is not None and count >= max_rows:
                break
            symbol = (row.get("symbol") or "").strip().upper()
            if not symbol or (wanted is not None and symbol not in wanted):
                continue
            ts = _parse_bar_ts(row.get("ts") or "")
            fields = [finite_float(row.get(k)) for k in ("open", "high", "low", "close", "volume")]
            if ts is None or any(v is None for v in fields):
                log.debug("loader.bad_bar_row", extra={"path": str(csv_path), "line": line_no})
                continue
            open_, high, low, close, volume = fields
            yield Bar(symbol, ts, open_, high, low, close, volume)
            count += 1


def load_news(ndjson_path: Path | str) -> List[NewsItem]:
    """Read one JSON object per line into :class:`NewsItem` records."""

    items: List[NewsItem] = []
    try:
        with open(ndjson_path, "r", encoding="utf-8") as handle:
            for line_no, line in enumerate(handle, start=1):
                if not line.strip():
                    continue
                try:
                    obj = json.loads(line)
                except json.JSONDecodeError:
                    log.warning("loader.bad_news_line", extra={"path": str(ndjson_path), "line": line_no})
                    continue
                if not isinstance(obj, dict):
                    continue
                raw_symbols = obj.get("symbols") or ([obj["symbol"]] if obj.get("symbol") else [])
                symbols: List[str] = [str(s).upper() for s in raw_symbols if s]
                items.append(
                    NewsItem(
                        id=str(obj.get("id") or obj.get("url") or f"{ndjson_path}:{line_no}"),
                        title=str(obj.get("title") or ""),
                        summary=str(obj.get("summary") or ""),
                        url=obj.get("url"),
                        source=str(obj.get("source") or "replay"),
                        published_at=obj.get("published_at") or obj.get("publishedAt"),
                        symbols=symbols,
                        market_cap=finite_float(obj.get("market_cap")),
                        lang=str(obj.get("lang") or "en"),
                    )
                )
    except FileNotFoundError:
        log.warning("loader.news_missing", extra={"path": str(ndjson_path)})
    return items


__all__ = ["load_bars", "load_news"]
