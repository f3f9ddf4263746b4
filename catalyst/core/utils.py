"""General utilities."""
from __future__ import annotations

import math
from typing import Any


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def finite_float(value: Any) -> float | None:
    """Coerce ``value`` to a finite float, or ``None``."""

    if value is None or isinstance(value, bool):
        return None
    try:
        num = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(num):
        return None
    return num


def safe_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    try:
        return str(value)
    except Exception:  # noqa: BLE001 - arbitrary objects may have broken __str__
        return ""


__all__ = ["clamp", "finite_float", "safe_text"]
