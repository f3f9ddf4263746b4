"""SQLite-backed dedupe store for acted-on news events."""

from __future__ import annotations

import hashlib
import sqlite3
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from catalyst.services.news.types import NewsItem, ScoredItem

_CREATE_TABLES = (
    """
    CREATE TABLE IF NOT EXISTS events (
        hash TEXT PRIMARY KEY,
        item_id TEXT,
        symbol TEXT,
        klass TEXT,
        score REAL,
        title TEXT,
        url TEXT,
        source TEXT,
        published_at TEXT,
        saved_ts TEXT NOT NULL
    );
    """,
    "CREATE INDEX IF NOT EXISTS idx_events_symbol ON events(symbol);",
)


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat()


def make_hash(item: NewsItem) -> str:
    """Stable key over title, url and source."""

    raw = "|".join((item.title or "", item.url or "", item.source or ""))
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()


class EventStore:
    """Thread-safe SQLite store answering "have we acted on this item?"."""

    def __init__(self, db_path: Path | str) -> None:
        self.db_path = Path(db_path)
        if str(db_path) != ":memory:":
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(str(db_path), check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._lock = threading.RLock()
        with self._conn:
            for ddl in _CREATE_TABLES:
                self._conn.execute(ddl)

    make_hash = staticmethod(make_hash)

    def seen(self, key: str) -> bool:
        with self._lock:
            row = self._conn.execute("SELECT 1 FROM events WHERE hash = ?", (key,)).fetchone()
        return row is not None

    def save(self, item: NewsItem | ScoredItem, key: Optional[str] = None) -> str:
        """Persist ``item`` (idempotent) and return its key."""

        scored = item if isinstance(item, ScoredItem) else None
        news = scored.item if scored is not None else item
        key = key or make_hash(news)
        payload = {
            "hash": key,
            "item_id": news.id,
            "symbol": news.primary_symbol,
            "klass": scored.klass.value if scored is not None else None,
            "score": scored.score if scored is not None else None,
            "title": news.title,
            "url": news.url,
            "source": news.source,
            "published_at": news.published_at,
            "saved_ts": _utcnow(),
        }
        with self._lock, self._conn:
            self._conn.execute(
                """
                INSERT OR IGNORE INTO events (
                    hash, item_id, symbol, klass, score, title, url, source, published_at, saved_ts
                ) VALUES (
                    :hash, :item_id, :symbol, :klass, :score, :title, :url, :source, :published_at, :saved_ts
                )
                """,
                payload,
            )
        return key

    def count(self) -> int:
        with self._lock:
            row = self._conn.execute("SELECT COUNT(*) AS n FROM events").fetchone()
        return int(row["n"])

    def close(self) -> None:
        with self._lock:
            self._conn.close()


__all__ = ["EventStore", "make_hash"]
