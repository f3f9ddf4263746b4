"""Exit policy for open paper positions."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from catalyst.core.config import ExitConfig
from catalyst.core.utils import finite_float
from catalyst.services.sim.types import Position


@dataclass(frozen=True, slots=True)
class ExitDecision:
    reason: str
    price: float


def evaluate_exit(
    position: Position,
    last_price: float,
    now: datetime,
    config: Optional[ExitConfig] = None,
) -> Optional[ExitDecision]:
    """Return the first exit rule that fires, or ``None``.

    Raises the position's high watermark to ``last_price`` before checking:
    trailing stop, then profit target, then the time stop.
    """

    cfg = config or ExitConfig()
    px = finite_float(last_price)
    if px is None or px <= 0 or position.avg <= 0:
        return None

    position.high = max(position.high, px)
    gain = px / position.avg - 1.0
    drawdown = px / position.high - 1.0
    minutes_open = (now - position.open_ts).total_seconds() / 60.0

    if drawdown <= -cfg.trail_pct:
        return ExitDecision("trail", px)
    if gain >= cfg.target_pct:
        return ExitDecision(f"target{int(round(cfg.target_pct * 100))}", px)
    if minutes_open >= cfg.time_stop_minutes and gain < cfg.time_stop_min_gain:
        return ExitDecision("time", px)
    return None


__all__ = ["ExitDecision", "evaluate_exit"]
