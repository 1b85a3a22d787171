"""Data models for the speechpractice application."""

from .audio import AudioFrame, AudioStats, CaptureConstraints
from .events import BreathHoldRecord, SessionEvent, TargetHitEvent
from .session import LoudnessReading, ReadingSummary, SessionConfig, SessionStatus

__all__ = [
    "AudioFrame",
    "AudioStats",
    "CaptureConstraints",
    "BreathHoldRecord",
    "SessionEvent",
    "TargetHitEvent",
    "LoudnessReading",
    "ReadingSummary",
    "SessionConfig",
    "SessionStatus",
]
