from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional

import pytest

from catalyst.core.config import reset_settings_cache
from catalyst.services.market.types import Bar
from catalyst.services.news.types import NewsItem

_ENV_KEYS = (
    "ALERT_THRESHOLD",
    "VOL_Z_MIN",
    "RET_1M_MIN",
    "VWAP_DEV_MIN",
    "VOL_WINDOW_SIZE",
    "POLL_NEWS_SECONDS",
    "NEWS_LOOKBACK_MINUTES",
    "STARTING_CASH",
    "RISK_PCT",
    "SIZING_EQUITY",
    "MARKETAUX_API_KEY",
    "FMP_API_KEY",
    "DISCORD_WEBHOOK_URL",
    "DB_PATH",
    "FILLS_DIR",
    "LOG_LEVEL",
)

WIRE_URL = "https://www.globenewswire.com/news-release/2024/03/04/acme.html"
OFFWIRE_URL = "https://example-blog.net/posts/acme"


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    """Run every test without ambient settings or a stray ``.env``."""

    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    reset_settings_cache()
    yield
    reset_settings_cache()


@pytest.fixture
def t0() -> datetime:
    # Monday 2024-03-04 10:00 US/Eastern
    return datetime(2024, 3, 4, 15, 0, tzinfo=timezone.utc)


@pytest.fixture
def make_item() -> Callable[..., NewsItem]:
    counter = {"n": 0}

    def _make(
        title: str,
        summary: str = "",
        url: Optional[str] = WIRE_URL,
        symbols: Optional[List[str]] = None,
        **kwargs,
    ) -> NewsItem:
        counter["n"] += 1
        return NewsItem(
            id=kwargs.pop("id", f"item-{counter['n']}"),
            title=title,
            summary=summary,
            url=url,
            source=kwargs.pop("source", "test"),
            symbols=list(symbols or []),
            **kwargs,
        )

    return _make


@pytest.fixture
def make_bar(t0: datetime) -> Callable[..., Bar]:
    def _make(symbol: str, minute: int, close: float, volume: float, open_: Optional[float] = None) -> Bar:
        px_open = close if open_ is None else open_
        return Bar(
            symbol=symbol,
            ts=t0 + timedelta(minutes=minute),
            open=px_open,
            high=max(px_open, close),
            low=min(px_open, close),
            close=close,
            volume=volume,
        )

    return _make
