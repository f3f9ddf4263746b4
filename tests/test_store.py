from __future__ import annotations

import sqlite3

from catalyst.services.news.classifier import classify
from catalyst.services.news.scoring import score
from catalyst.services.news.store import EventStore, make_hash


def test_hash_is_stable_and_ignores_symbols(make_item) -> None:
    a = make_item("Acme Wins Contract", symbols=["ACME"])
    b = make_item("Acme Wins Contract", symbols=["OTHER"])
    assert make_hash(a) == make_hash(b)
    assert make_hash(a) != make_hash(make_item("Acme Wins Contract", source="other"))


def test_seen_after_save(tmp_path, make_item) -> None:
    store = EventStore(tmp_path / "nested" / "events.db")
    item = make_item("Company X Receives FDA Approval for Drug Y", symbols=["XYZ"])
    key = EventStore.make_hash(item)
    assert not store.seen(key)
    assert store.save(score(classify(item))) == key
    assert store.seen(key)
    store.save(item)
    assert store.count() == 1
    store.close()


def test_saved_row_carries_class_and_score(tmp_path, make_item) -> None:
    path = tmp_path / "events.db"
    store = EventStore(path)
    scored = score(classify(make_item("Company X Receives FDA Approval for Drug Y", symbols=["XYZ"])))
    store.save(scored)
    store.close()

    conn = sqlite3.connect(path)
    row = conn.execute("SELECT symbol, klass, score FROM events").fetchone()
    conn.close()
    assert row[0] == "XYZ"
    assert row[1] == "FDA_MARKETING_AUTH"
    assert row[2] == scored.score


def test_in_memory_store(make_item) -> None:
    store = EventStore(":memory:")
    key = store.save(make_item("Plain news"), key="custom")
    assert key == "custom"
    assert store.seen("custom")
