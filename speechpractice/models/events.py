"""Event models published on the feedback and session topics."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict


@dataclass
class TargetHitEvent:
    """Smoothed loudness crossed up through the target."""
    timestamp: float
    loudness: float
    target: float
    hit_number: int


@dataclass(frozen=True)
class BreathHoldRecord:
    """A completed sustained-phonation hold."""
    duration: float  # Seconds, one decimal place
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass
class SessionEvent:
    """Session lifecycle event."""
    session_name: str  # "loudness", "reading", ...
    event_type: str  # "started", "stopped", "error"
    timestamp: datetime = field(default_factory=datetime.now)
    metadata: Dict[str, Any] = field(default_factory=dict)
