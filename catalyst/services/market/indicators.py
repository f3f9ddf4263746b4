"""Rolling statistics used by the confirmation gate."""

from __future__ import annotations

import math
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Optional

Number = float


@dataclass
class RollingWindow:
    """Fixed-capacity FIFO of per-bar volumes; oldest samples are evicted first."""

    capacity: int = 60
    values: Deque[Number] = field(init=False)

    def __post_init__(self) -> None:
        if self.capacity <= 0:
            raise ValueError("window capacity must be positive")
        self.values = deque(maxlen=self.capacity)

    def __len__(self) -> int:
        return len(self.values)

    def push(self, value: Number) -> None:
        self.values.append(value)

    def last(self) -> Optional[Number]:
        return self.values[-1] if self.values else None

    def mean(self) -> Number:
        if not self.values:
            return 0.0
        return sum(self.values) / len(self.values)

    def std(self) -> Number:
        """Sample standard deviation (n-1); 0 with fewer than two samples."""

        n = len(self.values)
        if n < 2:
            return 0.0
        mean = self.mean()
        variance = sum((x - mean) ** 2 for x in self.values) / (n - 1)
        return math.sqrt(variance)

    def zscore(self) -> Number:
        last = self.last()
        std = self.std()
        if last is None or math.isclose(std, 0.0):
            return 0.0
        return (last - self.mean()) / std


@dataclass
class VwapAccumulator:
    """Session VWAP from cumulative price*volume and volume."""

    price_volume: Number = 0.0
    volume: Number = 0.0

    def update(self, price: Number, volume: Number) -> None:
        if volume <= 0:
            return
        self.price_volume += price * volume
        self.volume += volume

    def vwap(self, fallback: Number) -> Number:
        if self.volume > 0:
            return self.price_volume / self.volume
        return fallback


__all__ = ["RollingWindow", "VwapAccumulator"]
