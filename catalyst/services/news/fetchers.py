"""News provider adapters producing normalized :class:`NewsItem` streams."""

from __future__ import annotations

import logging
import random
import time
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Protocol

import requests

from catalyst.services.news.filters import dedupe, parse_timestamp
from catalyst.services.news.types import NewsItem

log = logging.getLogger("catalyst.news.fetchers")

MARKETAUX_URL = "https://api.marketaux.com/v1/news/all"
FMP_PRESS_URL = "https://financialmodelingprep.com/stable/news/press-releases-latest"
USER_AGENT = "catalyst-sim/0.1"


class ProviderError(RuntimeError):
    """Raised when a provider request fails permanently."""


class RateLimitError(ProviderError):
    """Raised when rate-limit retries are exhausted."""


class NewsFetcher(Protocol):
    name: str

    def fetch(self, now: Optional[datetime] = None) -> List[NewsItem]: ...


def _retriable(status: Optional[int]) -> bool:
    return status == 429 or (status is not None and status >= 500)


def get_json_with_retry(
    session: requests.Session,
    url: str,
    params: Mapping[str, Any],
    *,
    timeout: float,
    max_retries: int = 3,
    base_delay: float = 0.9,
    max_delay: float = 15.0,
    sleep: Callable[[float], None] = time.sleep,
    label: str = "",
) -> Any:
    """GET ``url`` and decode JSON, backing off on timeouts, 429 and 5xx."""

    delay = base_delay
    attempt = 0
    while True:
        status: Optional[int] = None
        try:
            response = session.get(url, params=dict(params), timeout=timeout, headers={"User-Agent": USER_AGENT})
            status = response.status_code
            if 200 <= status < 300:
                return response.json()
            error: Exception = ProviderError(f"{label or url} responded with HTTP {status}")
        except requests.Timeout as exc:
            error = exc
            retriable = True
        except requests.RequestException as exc:
            raise ProviderError(f"{label or url} request failed: {exc}") from exc
        else:
            retriable = _retriable(status)

        log.warning("provider.page_error", extra={"label": label, "status": status, "error": str(error)})
        if not retriable:
            raise error if isinstance(error, ProviderError) else ProviderError(str(error))
        if attempt >= max_retries:
            if status == 429:
                raise RateLimitError(f"{label or url}: max retries exceeded after 429 responses")
            raise ProviderError(f"{label or url}: max retries exceeded ({error})")
        attempt += 1
        wait = min(max_delay, delay) + random.uniform(0.0, 0.3)
        log.info("provider.retry", extra={"label": label, "attempt": attempt, "wait_s": round(wait, 3)})
        sleep(wait)
        delay *= 2


def _fmt_marketaux(ts: datetime) -> str:
    return ts.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S")


class MarketauxFetcher:
    """Global Marketaux firehose, paginated and deduplicated by id."""

    name = "marketaux"

    def __init__(
        self,
        api_key: Optional[str],
        *,
        lookback_minutes: int = 180,
        max_pages: int = 2,
        page_limit: int = 20,
        timeout: float = 15.0,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.api_key = api_key
        self.lookback_minutes = lookback_minutes
        self.max_pages = max_pages
        self.page_limit = page_limit
        self.timeout = timeout
        self.session = session or requests.Session()
        self._sleep = sleep

    @staticmethod
    def _symbols(article: Mapping[str, Any]) -> List[str]:
        symbols: List[str] = []
        for entity in article.get("entities") or []:
            if not isinstance(entity, Mapping):
                continue
            kind = entity.get("type") or entity.get("entity_type")
            ticker = entity.get("symbol") or entity.get("ticker")
            if kind == "equity" and ticker:
                symbols.append(str(ticker).upper())
        return symbols

    def _to_item(self, article: Mapping[str, Any], now: datetime) -> NewsItem:
        published = article.get("published_at") or article.get("published_on") or now.isoformat()
        return NewsItem(
            id=str(article.get("uuid") or article.get("url") or article.get("title") or published),
            url=article.get("url"),
            title=str(article.get("title") or ""),
            summary=str(article.get("description") or article.get("snippet") or ""),
            source=self.name,
            published_at=str(published),
            symbols=self._symbols(article),
            lang=str(article.get("language") or "en"),
        )

    def fetch(self, now: Optional[datetime] = None) -> List[NewsItem]:
        if not self.api_key:
            log.debug("marketaux.skipped", extra={"reason": "missing api key"})
            return []
        now = now or datetime.now(timezone.utc)
        published_after = _fmt_marketaux(now - timedelta(minutes=self.lookback_minutes))
        out: List[NewsItem] = []
        for page in range(1, self.max_pages + 1):
            params: Dict[str, Any] = {
                "api_token": self.api_key,
                "language": "en",
                "filter_entities": "true",
                "entity_types": "equity",
                "published_after": published_after,
                "limit": self.page_limit,
                "page": page,
            }
            try:
                payload = get_json_with_retry(
                    self.session,
                    MARKETAUX_URL,
                    params,
                    timeout=self.timeout,
                    sleep=self._sleep,
                    label=f"marketaux page#{page}",
                )
            except ProviderError as exc:
                log.warning("marketaux.pagination_aborted", extra={"page": page, "error": str(exc)})
                break
            articles = payload.get("data") if isinstance(payload, Mapping) else None
            if not isinstance(articles, list) or not articles:
                break
            out.extend(self._to_item(a, now) for a in articles if isinstance(a, Mapping))
            if len(articles) < self.page_limit:
                break
            self._sleep(0.15)
        items = dedupe(out)
        log.info("marketaux.fetched", extra={"count": len(items)})
        return items


class FmpPressReleaseFetcher:
    """Latest FinancialModelingPrep press releases from the past hour."""

    name = "fmp_pr"

    def __init__(
        self,
        api_key: Optional[str],
        *,
        window_minutes: int = 60,
        limit: int = 30,
        timeout: float = 8.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.api_key = api_key
        self.window_minutes = window_minutes
        self.limit = limit
        self.timeout = timeout
        self.session = session or requests.Session()

    def fetch(self, now: Optional[datetime] = None) -> List[NewsItem]:
        if not self.api_key:
            log.debug("fmp.skipped", extra={"reason": "missing api key"})
            return []
        now = now or datetime.now(timezone.utc)
        payload = get_json_with_retry(
            self.session,
            FMP_PRESS_URL,
            {"limit": self.limit, "apikey": self.api_key},
            timeout=self.timeout,
            max_retries=0,
            label="fmp press releases",
        )
        rows = payload if isinstance(payload, list) else []
        cutoff = now - timedelta(minutes=self.window_minutes)
        items: List[NewsItem] = []
        for row in rows:
            if not isinstance(row, Mapping):
                continue
            published = parse_timestamp(row.get("date"))
            if published is None or published < cutoff:
                continue
            symbol = row.get("symbol")
            items.append(
                NewsItem(
                    id=f"{symbol}|{row.get('date')}|{row.get('link')}",
                    url=row.get("link"),
                    title=str(row.get("title") or ""),
                    summary=str(row.get("text") or ""),
                    source=self.name,
                    published_at=str(row.get("date")),
                    symbols=[str(symbol).upper()] if symbol else [],
                )
            )
        log.info("fmp.fetched", extra={"articles": len(rows), "recent": len(items)})
        return items


def fetch_all(fetchers: Iterable[NewsFetcher], now: Optional[datetime] = None) -> List[NewsItem]:
    """Run every fetcher; a failing provider is logged and skipped."""

    out: List[NewsItem] = []
    for fetcher in fetchers:
        name = getattr(fetcher, "name", type(fetcher).__name__)
        try:
            out.extend(fetcher.fetch(now))
        except Exception as exc:  # noqa: BLE001 - provider isolation
            log.warning("provider.fetch_failed", extra={"provider": name, "error": str(exc)})
    return out


__all__ = [
    "FmpPressReleaseFetcher",
    "MarketauxFetcher",
    "NewsFetcher",
    "ProviderError",
    "RateLimitError",
    "fetch_all",
    "get_json_with_retry",
]
