from __future__ import annotations

import math
from datetime import datetime, timezone

from catalyst.core.market_hours import session_date
from catalyst.core.utils import clamp, finite_float, safe_text


def test_clamp() -> None:
    assert clamp(1.4) == 1.0
    assert clamp(-0.2) == 0.0
    assert clamp(0.3) == 0.3


def test_finite_float() -> None:
    assert finite_float("2.5") == 2.5
    assert finite_float(math.nan) is None
    assert finite_float("inf") is None
    assert finite_float(True) is None
    assert finite_float(None) is None
    assert finite_float("abc") is None


def test_safe_text_survives_broken_str() -> None:
    class Broken:
        def __str__(self) -> str:
            raise RuntimeError("nope")

    assert safe_text(None) == ""
    assert safe_text(12) == "12"
    assert safe_text(Broken()) == ""


def test_session_date_uses_eastern_calendar() -> None:
    # 01:30 UTC on the 5th is still the evening of the 4th in New York
    assert session_date(datetime(2024, 3, 5, 1, 30, tzinfo=timezone.utc)).isoformat() == "2024-03-04"
    assert session_date(datetime(2024, 3, 4, 15, 0)).isoformat() == "2024-03-04"
