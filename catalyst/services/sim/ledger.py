"""Paper-trading ledger: cash, open positions, realized P&L and fills."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Dict, List, Mapping, Optional

from catalyst.core.config import ExitConfig
from catalyst.core.utils import finite_float
from catalyst.services.policy.exits import evaluate_exit
from catalyst.services.sim.types import Fill, Order, Position

log = logging.getLogger("catalyst.sim.ledger")


class Ledger:
    """Applies orders as immediate fills. Long-only; sells without a position are ignored."""

    def __init__(self, starting_cash: float = 100_000.0, exit_config: Optional[ExitConfig] = None) -> None:
        self.cash = float(starting_cash)
        self.exit_config = exit_config or ExitConfig()
        self.positions: Dict[str, Position] = {}
        self.realized_pnl = 0.0
        self._fills: List[Fill] = []

    @property
    def fills(self) -> List[Fill]:
        return list(self._fills)

    def fill(self, order: Order) -> Optional[Fill]:
        """Apply ``order``; returns the recorded fill or ``None`` for a no-op."""

        px = finite_float(getattr(order, "px", None))
        size = finite_float(getattr(order, "qty", None))
        if order is None or px is None or size is None or size <= 0:
            return None
        qty = order.qty

        if order.side == "buy":
            self.cash -= px * qty
            pos = self.positions.get(order.symbol)
            if pos is None:
                self.positions[order.symbol] = Position(order.symbol, qty, px, order.ts, px)
            else:
                new_qty = pos.qty + qty
                pos.avg = (pos.avg * pos.qty + px * qty) / new_qty
                pos.qty = new_qty
                pos.high = max(pos.high, px)
            return self._record(Fill(order.ts, order.symbol, "buy", px, qty))

        if order.side != "sell":
            log.debug("ledger.unknown_side", extra={"symbol": order.symbol, "side": order.side})
            return None
        pos = self.positions.get(order.symbol)
        if pos is None:
            return None
        sold = min(qty, pos.qty)
        self._close(pos, px, sold)
        if order.symbol in self.positions:
            pos.high = max(pos.high, px)
        return self._record(Fill(order.ts, order.symbol, "sell", px, sold))

    def try_exit(self, symbol: str, last_price: float, now: datetime) -> Optional[Fill]:
        """Evaluate the exit policy and close the full position on a trigger."""

        pos = self.positions.get(symbol)
        if pos is None:
            return None
        decision = evaluate_exit(pos, last_price, now, self.exit_config)
        if decision is None:
            return None
        qty = pos.qty
        self._close(pos, decision.price, qty)
        return self._record(Fill(now, symbol, "sell", decision.price, qty, decision.reason))

    def equity(self, marks: Optional[Mapping[str, float]] = None) -> float:
        """Cash plus open positions at ``marks``, falling back to cost basis."""

        marks = marks or {}
        value = self.cash
        for pos in self.positions.values():
            mark = finite_float(marks.get(pos.symbol))
            value += (mark if mark is not None else pos.avg) * pos.qty
        return value

    def dump_fills(self) -> List[Fill]:
        return list(self._fills)

    def reset(self, starting_cash: Optional[float] = None) -> None:
        self._fills.clear()
        self.positions.clear()
        self.realized_pnl = 0.0
        if starting_cash is not None:
            self.cash = float(starting_cash)

    def _close(self, pos: Position, px: float, qty: int) -> None:
        self.cash += px * qty
        self.realized_pnl += (px - pos.avg) * qty
        pos.qty -= qty
        if pos.qty <= 0:
            del self.positions[pos.symbol]

    def _record(self, fill: Fill) -> Fill:
        self._fills.append(fill)
        log.debug(
            "ledger.fill",
            extra={"symbol": fill.symbol, "side": fill.side, "px": fill.px, "qty": fill.qty, "reason": fill.reason},
        )
        return fill


__all__ = ["Ledger"]
