"""Notification helpers for trading alerts."""

from __future__ import annotations

import logging
from typing import Optional

import requests

from catalyst.core.config import get_settings

log = logging.getLogger("catalyst.ops.alerts")

# Discord rejects message content longer than this.
DISCORD_MAX_CHARS = 2000


def _webhook_url() -> Optional[str]:
    return get_settings().discord_webhook_url


def send_discord(text: str, webhook_url: Optional[str] = None, session: Optional[requests.Session] = None) -> bool:
    """Post ``text`` to the Discord webhook.

    Returns ``True`` when the POST succeeds and ``False`` when skipped or failed.
    Missing webhook configuration is treated as a no-op.
    """

    url = webhook_url or _webhook_url()
    if not url:
        log.debug("DISCORD_WEBHOOK_URL not configured; skipping Discord alert")
        return False

    poster = session or requests
    try:
        response = poster.post(url, json={"content": text[:DISCORD_MAX_CHARS]}, timeout=5)
    except Exception:  # noqa: BLE001
        log.exception("failed to send Discord alert")
        return False

    if 200 <= response.status_code < 300:
        return True

    log.warning("Discord webhook responded with status %s", response.status_code)
    return False


__all__ = ["send_discord"]
