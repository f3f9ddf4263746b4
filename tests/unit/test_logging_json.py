from __future__ import annotations

import logging

import orjson

from catalyst.core.logging import JsonFormatter, setup_logging


def _record(msg: str, **extra) -> logging.LogRecord:
    record = logging.LogRecord("catalyst.test", logging.INFO, __file__, 1, msg, (), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_formatter_includes_extras() -> None:
    line = JsonFormatter().format(_record("news.watchlist_add", symbol="ACME", score=0.81))
    payload = orjson.loads(line)
    assert payload["msg"] == "news.watchlist_add"
    assert payload["logger"] == "catalyst.test"
    assert payload["level"] == "INFO"
    assert payload["symbol"] == "ACME"
    assert payload["score"] == 0.81


def test_formatter_stringifies_unknown_types() -> None:
    payload = orjson.loads(JsonFormatter().format(_record("x", when=object())))
    assert isinstance(payload["when"], str)


def test_setup_logging_adds_file_handler(tmp_path) -> None:
    root = logging.getLogger()
    saved, level = list(root.handlers), root.level
    try:
        setup_logging("debug", tmp_path / "logs" / "app.log")
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 2
        assert all(isinstance(h.formatter, JsonFormatter) for h in root.handlers)
        logging.getLogger("catalyst.test").info("hello", extra={"k": 1})
        for handler in root.handlers:
            handler.flush()
        text = (tmp_path / "logs" / "app.log").read_text(encoding="utf-8")
        assert orjson.loads(text.splitlines()[-1])["k"] == 1
    finally:
        for handler in root.handlers:
            if handler not in saved:
                handler.close()
        root.handlers[:] = saved
        root.setLevel(level)
