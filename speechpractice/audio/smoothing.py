"""Two-stage smoothing of the loudness signal."""

from collections import deque

DEFAULT_WINDOW = 3


class LoudnessSmoother:
    """Exponential smoothing followed by a short rolling average."""

    def __init__(self, smoothing_factor: float = 0.5, window: int = DEFAULT_WINDOW):
        if not 0 <= smoothing_factor < 1:
            raise ValueError(f"smoothing_factor must be in [0, 1), got {smoothing_factor}")
        if window < 1:
            raise ValueError(f"window must be at least 1, got {window}")
        self.smoothing_factor = smoothing_factor
        self.smoothed = 0.0
        self.history = deque(maxlen=window)

    @property
    def value(self) -> float:
        """Current display value, 0 before the first update."""
        if not self.history:
            return 0.0
        return sum(self.history) / len(self.history)

    def update(self, raw: float) -> float:
        """Feed one raw loudness sample and return the smoothed output."""
        factor = self.smoothing_factor
        self.smoothed = self.smoothed * factor + raw * (1 - factor)
        self.history.append(self.smoothed)
        return self.value

    def reset(self) -> None:
        self.smoothed = 0.0
        self.history.clear()
