"""Helpers for US equity session boundaries."""

from __future__ import annotations

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

_EASTERN = ZoneInfo("America/New_York")


def _normalize_now(now: datetime | None = None) -> datetime:
    if now is None:
        now = datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(_EASTERN)


def session_date(ts: datetime | None = None) -> date:
    """Return the US-Eastern calendar date that ``ts`` belongs to."""

    return _normalize_now(ts).date()


__all__ = ["session_date"]
