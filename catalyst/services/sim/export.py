"""CSV export of simulated fills."""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Iterable

from catalyst.services.sim.types import Fill

FILL_COLUMNS = ("ts", "symbol", "side", "px", "qty", "reason")


def write_fills_csv(fills: Iterable[Fill], path: Path | str) -> Path:
    """Write ``fills`` to ``path`` (parents created) and return the path."""

    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    with target.open("w", encoding="utf-8", newline="") as handle:
        writer = csv.writer(handle)
        writer.writerow(FILL_COLUMNS)
        for fill in fills:
            writer.writerow([fill.ts.isoformat(), fill.symbol, fill.side, fill.px, fill.qty, fill.reason or ""])
    return target


__all__ = ["FILL_COLUMNS", "write_fills_csv"]
