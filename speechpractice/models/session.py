"""Session-related data models."""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, List, Optional

TARGET_VOLUME_MIN = 10
TARGET_VOLUME_MAX = 80
TARGET_VOLUME_STEP = 5
SENSITIVITY_MIN = 0.5
SENSITIVITY_MAX = 4.0


class SessionStatus(Enum):
    IDLE = "idle"
    RUNNING = "running"
    STOPPED = "stopped"


@dataclass(frozen=True)
class SessionConfig:
    """User-adjustable loudness settings, fixed for the duration of a tick."""
    target_volume: float = 40
    sensitivity_boost: float = 2.0
    smoothing_factor: float = 0.5

    def __post_init__(self):
        if not TARGET_VOLUME_MIN <= self.target_volume <= TARGET_VOLUME_MAX:
            raise ValueError(
                f"target_volume must be between {TARGET_VOLUME_MIN} and "
                f"{TARGET_VOLUME_MAX}, got {self.target_volume}")
        if self.target_volume % TARGET_VOLUME_STEP:
            raise ValueError(
                f"target_volume must be a multiple of {TARGET_VOLUME_STEP}, "
                f"got {self.target_volume}")
        if not SENSITIVITY_MIN <= self.sensitivity_boost <= SENSITIVITY_MAX:
            raise ValueError(
                f"sensitivity_boost must be between {SENSITIVITY_MIN} and "
                f"{SENSITIVITY_MAX}, got {self.sensitivity_boost}")
        if not 0 <= self.smoothing_factor < 1:
            raise ValueError(
                f"smoothing_factor must be in [0, 1), got {self.smoothing_factor}")

    def with_updates(self, **changes) -> "SessionConfig":
        """Return a validated copy with the given fields replaced."""
        return replace(self, **changes)


@dataclass
class LoudnessReading:
    """What the display needs after each processed frame."""
    raw: float
    smoothed: float
    target: float
    above_target: bool
    targets_hit: int
    breath_holding: bool = False
    breath_hold_time: float = 0.0
    best_breath_hold: float = 0.0


@dataclass
class ReadingSummary:
    """Result of a finished reading-aloud session."""
    consistency_score: int
    average_volume: int
    sentences_read: int
    volume_history: List[Dict[str, float]] = field(default_factory=list)
    story_id: Optional[str] = None
    story_title: Optional[str] = None

    def to_record(self) -> Dict:
        """Shape stored under reading_records."""
        return {
            "storyId": self.story_id,
            "storyTitle": self.story_title,
            "consistencyScore": self.consistency_score,
            "averageVolume": self.average_volume,
            "sentencesRead": self.sentences_read,
            "volumeHistory": list(self.volume_history),
        }
