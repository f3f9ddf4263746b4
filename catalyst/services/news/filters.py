"""Filtering utilities for news ingestion."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Iterable, List, Optional, Set

from catalyst.services.news.types import NewsItem


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 (or ``YYYY-MM-DD HH:MM:SS``) timestamp as UTC."""

    if isinstance(value, datetime):
        ts = value
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            ts = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def dedupe(items: Iterable[NewsItem]) -> List[NewsItem]:
    """Deduplicate news items by id, keeping the first occurrence."""
    seen: Set[str] = set()
    out: List[NewsItem] = []
    for item in items:
        if item.id in seen:
            continue
        seen.add(item.id)
        out.append(item)
    return out


def within_lookback(items: Iterable[NewsItem], now: datetime, minutes: int) -> List[NewsItem]:
    """Keep items published within ``minutes`` of ``now``.

    Items whose timestamp is missing or unparseable are kept.
    """
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    cutoff = now - timedelta(minutes=minutes)
    out: List[NewsItem] = []
    for item in items:
        published = parse_timestamp(item.published_at)
        if published is None or published >= cutoff:
            out.append(item)
    return out


__all__ = ["dedupe", "parse_timestamp", "within_lookback"]
