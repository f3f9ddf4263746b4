"""Order, position and fill records for the paper ledger."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Literal, Optional

Side = Literal["buy", "sell"]


@dataclass(frozen=True, slots=True)
class Order:
    """Sized order. ``qty == 0`` means no feasible size and never fills."""

    side: Side
    symbol: str
    qty: int
    ts: datetime
    px: float
    stop_px: Optional[float] = None
    notional: Optional[float] = None


@dataclass(slots=True)
class Position:
    symbol: str
    qty: int
    avg: float
    open_ts: datetime
    high: float


@dataclass(frozen=True, slots=True)
class Fill:
    ts: datetime
    symbol: str
    side: Side
    px: float
    qty: int
    reason: Optional[str] = None


__all__ = ["Fill", "Order", "Position", "Side"]
