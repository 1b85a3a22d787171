"""Target-hit and breath-hold detection over the smoothed loudness stream.

Both trackers apply the same fixed hysteresis band: a tracker that went
above ``target`` only re-arms once loudness falls below ``target - 10``.
The band is an absolute offset and does not scale with the target.
"""

import logging
import math
from typing import Optional

logger = logging.getLogger(__name__)

HYSTERESIS_BAND = 10.0
TIMER_GRANULARITY = 0.1  # seconds
MIN_RECORDED_HOLD = 1.0  # seconds


class TargetHitTracker:
    """Edge-triggered detection of loudness reaching the target."""

    def __init__(self, hysteresis: float = HYSTERESIS_BAND):
        self.hysteresis = hysteresis
        self.above = False
        self.hits = 0

    def update(self, smoothed: float, target: float) -> bool:
        """Process one sample; True when it is a new below-to-above crossing."""
        if not self.above and smoothed >= target:
            self.above = True
            self.hits += 1
            logger.debug(f"Target hit #{self.hits}: {smoothed:.1f} >= {target}")
            return True
        if self.above and smoothed < target - self.hysteresis:
            self.above = False
        return False

    def reset(self) -> None:
        self.above = False
        self.hits = 0


class BreathHoldTracker:
    """Times sustained phonation above the target."""

    def __init__(
        self,
        hysteresis: float = HYSTERESIS_BAND,
        granularity: float = TIMER_GRANULARITY,
        min_hold: float = MIN_RECORDED_HOLD,
    ):
        self.hysteresis = hysteresis
        self.granularity = granularity
        self.min_hold = min_hold
        self.holding = False
        self.best = 0.0
        self._elapsed = 0.0

    @property
    def hold_time(self) -> float:
        """Current hold duration, counted in whole timer steps."""
        # Tolerance keeps 10 x 0.1 from flooring to 0.9.
        steps = math.floor(self._elapsed / self.granularity + 1e-6)
        return round(steps * self.granularity, 1)

    def update(self, smoothed: float, target: float, elapsed: float) -> Optional[float]:
        """Process one sample taken ``elapsed`` seconds after the previous one.

        Returns:
            The duration of a hold that just ended, if it lasted at least
            ``min_hold`` seconds; otherwise None.
        """
        if not self.holding:
            if smoothed < target:
                return None
            self.holding = True
            self._elapsed = 0.0
            logger.debug(f"Breath hold started at {smoothed:.1f}")

        if smoothed < target - self.hysteresis:
            duration = self.hold_time
            self.holding = False
            self._elapsed = 0.0
            if duration >= self.min_hold:
                logger.info(f"Breath hold finished: {duration:.1f}s")
                return duration
            logger.debug(f"Breath hold too short to record: {duration:.1f}s")
            return None

        self._elapsed += max(0.0, elapsed)
        self.best = max(self.best, self.hold_time)
        return None

    def reset(self) -> None:
        self.holding = False
        self.best = 0.0
        self._elapsed = 0.0
