from __future__ import annotations

from typing import Any, Dict, List

import pytest
import requests

from catalyst.services.ops.alerts import DISCORD_MAX_CHARS, send_discord


class FakeResponse:
    def __init__(self, status_code: int) -> None:
        self.status_code = status_code


class FakeSession:
    def __init__(self, status_code: int = 204, exc: Exception | None = None) -> None:
        self.status_code = status_code
        self.exc = exc
        self.posts: List[Dict[str, Any]] = []

    def post(self, url: str, json=None, timeout=None):
        self.posts.append({"url": url, "json": json, "timeout": timeout})
        if self.exc is not None:
            raise self.exc
        return FakeResponse(self.status_code)


def test_no_webhook_is_a_no_op() -> None:
    session = FakeSession()
    assert send_discord("hello", session=session) is False
    assert session.posts == []


def test_webhook_from_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DISCORD_WEBHOOK_URL", "https://discord.test/hook")
    session = FakeSession()
    assert send_discord("hello", session=session) is True
    assert session.posts[0]["url"] == "https://discord.test/hook"
    assert session.posts[0]["json"] == {"content": "hello"}
    assert session.posts[0]["timeout"] == 5


def test_long_messages_are_truncated() -> None:
    session = FakeSession()
    send_discord("x" * 5000, webhook_url="https://discord.test/hook", session=session)
    assert len(session.posts[0]["json"]["content"]) == DISCORD_MAX_CHARS


def test_error_status_returns_false() -> None:
    assert send_discord("hi", webhook_url="https://discord.test/hook", session=FakeSession(500)) is False


def test_transport_error_returns_false() -> None:
    session = FakeSession(exc=requests.ConnectionError("down"))
    assert send_discord("hi", webhook_url="https://discord.test/hook", session=session) is False
