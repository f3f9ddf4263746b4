"""Risk-based entry sizing."""

from __future__ import annotations

import math
from datetime import datetime
from typing import Optional

from catalyst.core.config import SizingConfig
from catalyst.core.utils import finite_float
from catalyst.services.sim.types import Order

# Keeps floor() exact for values like 100 / (2.00 - 1.84).
_EPS = 1e-9


def _round_to_tick(price: float, tick: float) -> float:
    return round(round(price / tick) * tick, 10)


def slippage(price: float, config: Optional[SizingConfig] = None) -> float:
    cfg = config or SizingConfig()
    return max(cfg.slippage_floor, price * cfg.slippage_bps / 10_000.0)


def size_entry(
    symbol: str,
    price: float,
    now: datetime,
    risk_pct: float = 0.01,
    equity: float = 10_000.0,
    config: Optional[SizingConfig] = None,
) -> Order:
    """Return a buy order sized so a stop-out loses ``risk_pct`` of ``equity``.

    The quantity is capped by the maximum notional, rounded down to the lot
    size and bumped toward the minimum notional without breaching the cap.
    A zero-quantity order is returned when no size satisfies the limits.
    """

    cfg = config or SizingConfig()
    raw_px = finite_float(price)
    if raw_px is None or raw_px <= 0:
        return Order("buy", symbol, 0, now, 0.0)
    px = max(cfg.min_price, _round_to_tick(raw_px, cfg.tick))

    stop = round(max(px * (1.0 - cfg.stop_pct), px - cfg.stop_abs), 10)
    risk_per_share = max(round(px - stop, 10), cfg.min_risk_per_share)

    budget = (finite_float(equity) or 0.0) * (finite_float(risk_pct) or 0.0)
    if budget <= 0:
        return Order("buy", symbol, 0, now, px)
    qty = math.floor(budget / risk_per_share + _EPS)

    max_qty = math.floor(cfg.max_notional / px + _EPS)
    max_qty -= max_qty % cfg.lot_size
    qty = max(0, min(qty, max_qty))
    qty -= qty % cfg.lot_size

    if qty > 0 and qty * px < cfg.min_notional:
        needed = math.ceil(cfg.min_notional / px - _EPS)
        needed += (-needed) % cfg.lot_size
        qty = min(needed, max_qty)

    if qty <= 0:
        return Order("buy", symbol, 0, now, px)

    entry_px = round(px + slippage(px, cfg), 6)
    return Order("buy", symbol, int(qty), now, entry_px, stop_px=round(stop, 4), notional=qty * entry_px)


__all__ = ["size_entry", "slippage"]
