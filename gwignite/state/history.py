"""gwignite/state/history.py

Bounded history of per-step outcomes.

The window is FIFO with a fixed capacity. A push that overflows the window
evicts the oldest excess rows in one batch. Aggregates are computed on
demand from the rows currently retained; every denominator is floored at 1,
so an empty window reports zero rates and means.

The fallback policy only sees the two-method read-only capability
(`mem_ignite_rate`, `mem_mean_d_g_broadcast`), never the rows themselves.
"""

from __future__ import annotations

from typing import Iterator, List

from ..types import HistoryFeatures, HistoryRow

EPS = 1e-9


class History:
    """FIFO window of :class:`HistoryRow` with rolling aggregates."""

    def __init__(self, capacity: int = 64) -> None:
        if int(capacity) <= 0:
            raise ValueError("capacity must be positive")
        self.capacity = int(capacity)
        self._rows: List[HistoryRow] = []

    def push(self, row: HistoryRow) -> None:
        """Append `row`, evicting the oldest rows beyond capacity."""
        self._rows.append(row)
        overflow = len(self._rows) - self.capacity
        if overflow > 0:
            del self._rows[:overflow]

    def clear(self) -> None:
        self._rows.clear()

    def __len__(self) -> int:
        return len(self._rows)

    def __iter__(self) -> Iterator[HistoryRow]:
        return iter(list(self._rows))

    def _mean(self, attr: str) -> float:
        n = float(max(len(self._rows), 1))
        return float(sum(float(getattr(r, attr)) for r in self._rows) / n)

    # ------------------------------------------------------------------
    # Read-only capability consumed by the fallback policy
    # ------------------------------------------------------------------
    def mem_ignite_rate(self) -> float:
        n = float(max(len(self._rows), 1))
        return float(sum(1 for r in self._rows if r.ignited) / n)

    def mem_mean_d_g_broadcast(self) -> float:
        return self._mean("d_g_broadcast")

    # ------------------------------------------------------------------
    def decay_hint(self) -> float:
        """Suggested forgetting weight; shrinks as the window fills."""
        return 1.0 / (1.0 + max(len(self._rows) / 16.0, EPS))

    def features(self, t: int) -> HistoryFeatures:
        """Snapshot of the window aggregates, stamped with timestep `t`."""
        return HistoryFeatures(
            t=int(t),
            window_len=len(self._rows),
            ignite_rate=self.mem_ignite_rate(),
            mean_d_g_broadcast=self.mem_mean_d_g_broadcast(),
            mean_temperature=self._mean("temperature"),
            mean_sniff_strength=self._mean("sniff_strength"),
            mean_touch_pressure=self._mean("touch_pressure"),
            decay_hint=self.decay_hint(),
        )
