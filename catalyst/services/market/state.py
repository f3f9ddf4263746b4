"""Per-symbol market statistics and the price-confirmation gate."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Dict, List, Optional

from catalyst.core.config import GateConfig
from catalyst.core.market_hours import session_date
from catalyst.core.utils import finite_float
from catalyst.services.market.indicators import RollingWindow, VwapAccumulator

log = logging.getLogger("catalyst.market.state")


@dataclass(frozen=True, slots=True)
class ConfirmSignal:
    """Outcome of a confirmation check for one symbol at one price."""

    symbol: str
    price: float
    vol_z: float
    ret_1m: float
    vwap_dev: float
    passed: bool


class MarketState:
    """Rolling volume window, session VWAP and reference price per symbol.

    State is created lazily on the first bar for a symbol and cleared on
    session rollover or via :meth:`reset_symbol`.
    """

    def __init__(self, config: Optional[GateConfig] = None) -> None:
        self.config = config or GateConfig()
        self._windows: Dict[str, RollingWindow] = {}
        self._vwaps: Dict[str, VwapAccumulator] = {}
        self._refs: Dict[str, float] = {}
        self._sessions: Dict[str, date] = {}

    def symbols(self) -> List[str]:
        return sorted(self._windows)

    def window(self, symbol: str) -> Optional[RollingWindow]:
        return self._windows.get(symbol)

    def reference_price(self, symbol: str) -> Optional[float]:
        return self._refs.get(symbol)

    def vwap(self, symbol: str, fallback: float) -> float:
        acc = self._vwaps.get(symbol)
        return acc.vwap(fallback) if acc is not None else fallback

    def on_bar(
        self,
        symbol: str,
        close: float,
        volume: float,
        ts: Optional[datetime] = None,
        reference: Optional[float] = None,
    ) -> bool:
        """Fold one bar into the symbol's statistics.

        Returns ``False`` (and changes nothing) for a bar with a non-finite or
        non-positive close or a negative volume, and for a late bar stamped in
        a session older than the one already being tracked. A bar from a newer
        session clears the symbol first. Out-of-order bars within the current
        session are folded in as they arrive.
        """

        px = finite_float(close)
        vol = finite_float(volume)
        if not symbol or px is None or px <= 0 or vol is None or vol < 0:
            log.debug("market.bar_rejected", extra={"symbol": symbol, "close": close, "volume": volume})
            return False

        if ts is not None:
            day = session_date(ts)
            previous = self._sessions.get(symbol)
            if previous is not None and day < previous:
                log.debug("market.stale_session_bar", extra={"symbol": symbol, "session": day.isoformat()})
                return False
            if previous is not None and day > previous:
                self.reset_symbol(symbol)
                log.info("market.session_reset", extra={"symbol": symbol, "session": day.isoformat()})
            self._sessions[symbol] = day

        window = self._windows.get(symbol)
        if window is None:
            window = self._windows[symbol] = RollingWindow(self.config.window_size)
        window.push(vol)
        self._vwaps.setdefault(symbol, VwapAccumulator()).update(px, vol)

        ref = finite_float(reference)
        self.set_reference_price(symbol, ref if ref is not None and ref > 0 else px)
        return True

    def set_reference_price(self, symbol: str, price: float) -> bool:
        """Set the session reference once; later calls are no-ops."""

        if symbol in self._refs:
            return False
        px = finite_float(price)
        if px is None or px <= 0:
            return False
        self._refs[symbol] = px
        return True

    def confirm(self, symbol: str, price: float) -> ConfirmSignal:
        px = finite_float(price)
        if px is None or px <= 0:
            return ConfirmSignal(symbol, 0.0, 0.0, 0.0, 0.0, False)

        window = self._windows.get(symbol)
        vol_z = window.zscore() if window is not None else 0.0
        vwap_price = self.vwap(symbol, px)
        vwap_dev = px / vwap_price - 1.0 if vwap_price > 0 else 0.0
        ref = self._refs.get(symbol, vwap_price)
        ret_1m = px / ref - 1.0 if ref > 0 else 0.0

        cfg = self.config
        passed = (vol_z >= cfg.vol_z_min and ret_1m >= cfg.ret_1m_min) or (
            vwap_dev >= cfg.vwap_dev_min and vol_z >= cfg.vol_z_min - 0.5
        )
        return ConfirmSignal(symbol, px, vol_z, ret_1m, vwap_dev, passed)

    def reset_symbol(self, symbol: str) -> None:
        """Clear all statistics for ``symbol``; unknown symbols are fine."""

        self._windows.pop(symbol, None)
        self._vwaps.pop(symbol, None)
        self._refs.pop(symbol, None)
        self._sessions.pop(symbol, None)

    def reset(self) -> None:
        self._windows.clear()
        self._vwaps.clear()
        self._refs.clear()
        self._sessions.clear()


__all__ = ["ConfirmSignal", "MarketState"]
