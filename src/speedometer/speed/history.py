from __future__ import annotations

from typing import List

import numpy as np


class SpeedHistory:
    """Fixed-capacity FIFO of speed readings backed by a preallocated array.

    Once full, each append overwrites the oldest reading. :meth:`values`
    returns readings oldest first.
    """

    def __init__(self, capacity: int) -> None:
        capacity = int(capacity)
        if capacity < 1:
            raise ValueError(f"history capacity must be >= 1, got {capacity}")
        self._buf = np.zeros(capacity, dtype=np.float64)
        self._head = 0
        self._count = 0

    @property
    def capacity(self) -> int:
        return int(self._buf.shape[0])

    def __len__(self) -> int:
        return self._count

    def append(self, value: float) -> None:
        self._buf[self._head] = float(value)
        self._head = (self._head + 1) % self.capacity
        if self._count < self.capacity:
            self._count += 1

    def clear(self) -> None:
        self._buf.fill(0.0)
        self._head = 0
        self._count = 0

    def mean(self) -> float:
        if self._count == 0:
            return 0.0
        if self._count < self.capacity:
            return float(np.mean(self._buf[: self._count]))
        return float(np.mean(self._buf))

    def values(self) -> List[float]:
        if self._count < self.capacity:
            return [float(v) for v in self._buf[: self._count]]
        ordered = np.concatenate([self._buf[self._head :], self._buf[: self._head]])
        return [float(v) for v in ordered]
