"""Threshold feedback, scoring and event publishing."""

from .consistency import consistency_score, voiced_average
from .publisher import FeedbackPublisher
from .threshold import HYSTERESIS_BAND, BreathHoldTracker, TargetHitTracker

__all__ = [
    "BreathHoldTracker",
    "TargetHitTracker",
    "HYSTERESIS_BAND",
    "FeedbackPublisher",
    "consistency_score",
    "voiced_average",
]
