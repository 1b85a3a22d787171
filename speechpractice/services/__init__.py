"""Services module for exercise sessions and result recording."""

from .articulation_session import ArticulationSession
from .loudness_session import LoudnessSession
from .pacing_session import PacingSession
from .reading_session import ReadingSession
from .session_recorder import SessionRecorder
from .tick_loop import TaskHandle, TickLoop

__all__ = [
    "ArticulationSession",
    "LoudnessSession",
    "PacingSession",
    "ReadingSession",
    "SessionRecorder",
    "TaskHandle",
    "TickLoop",
]
