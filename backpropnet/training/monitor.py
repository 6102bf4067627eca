"""Overfitting detection on the control-set error curve."""

from __future__ import annotations

from typing import Iterable, List, Sequence, Tuple

import numpy as np

SMOOTHING_WINDOW = 10


def fit_line(points: Sequence[float]) -> Tuple[float, float]:
    """Least-squares ``(slope, offset)`` of ``points`` against their 0-based index.

    Fewer than two points give ``(0.0, 0.0)``.
    """

    n = len(points)
    if n < 2:
        return 0.0, 0.0
    y = np.asarray(points, dtype=np.float64)
    x = np.arange(n, dtype=np.float64)
    sum_x = float(x.sum())
    sum_y = float(y.sum())
    sum_x2 = float((x * x).sum())
    sum_xy = float((x * y).sum())
    denom = n * sum_x2 - sum_x * sum_x
    offset = (sum_y * sum_x2 - sum_x * sum_xy) / denom
    slope = (n * sum_xy - sum_x * sum_y) / denom
    return slope, offset


class OverfittingMonitor:
    """Track control errors and the trend of their running mean.

    Every recorded error is appended to ``history``. Once more than
    ``window`` errors are known, the mean of the latest ``window`` is
    appended to ``smoothed`` and a line is refitted through it. A positive
    slope means the control error is trending upward.
    """

    def __init__(self, history: Iterable[float] = (), window: int = SMOOTHING_WINDOW) -> None:
        if window < 1:
            raise ValueError("window must be at least 1")
        self.window = int(window)
        self.history: List[float] = []
        self.smoothed: List[float] = []
        self.slope = 0.0
        self.offset = 0.0
        for value in history:
            self.record(value)

    def record(self, control_error: float) -> float:
        """Add one control error and return the refitted slope."""

        self.history.append(float(control_error))
        if len(self.history) > self.window:
            recent = self.history[-self.window:]
            self.smoothed.append(sum(recent) / self.window)
        self.slope, self.offset = fit_line(self.smoothed)
        return self.slope

    @property
    def overfitting(self) -> bool:
        return self.slope > 0


__all__ = ["fit_line", "OverfittingMonitor", "SMOOTHING_WINDOW"]
