"""Pacing board: one tap per syllable to slow the speech rate."""

import logging
import time
from typing import Callable, List, Optional

from ..feedback.messages import pace_feedback
from .session_recorder import SessionRecorder

logger = logging.getLogger(__name__)

DEFAULT_TARGET_MS = 500


class PacingSession:
    """Tracks intervals between syllable taps."""

    name = "pacing"

    def __init__(self, recorder: Optional[SessionRecorder] = None,
                 target_ms: float = DEFAULT_TARGET_MS,
                 clock: Callable[[], float] = time.monotonic):
        self.recorder = recorder
        self.target_ms = target_ms
        self.clock = clock

        self.is_active = False
        self.tap_times: List[float] = []
        self.current_tap = 0
        self.word_complete = False
        self.words_completed = 0
        self.started_at: Optional[float] = None
        self.last_tap_at: Optional[float] = None

    @property
    def average_interval(self) -> int:
        """Mean milliseconds between taps, 0 before the second tap."""
        if not self.tap_times:
            return 0
        return int(round(sum(self.tap_times) / len(self.tap_times)))

    @property
    def elapsed_seconds(self) -> int:
        if self.started_at is None:
            return 0
        return int(self.clock() - self.started_at)

    def start(self) -> None:
        self.is_active = True
        self.tap_times = []
        self.current_tap = 0
        self.word_complete = False
        self.words_completed = 0
        self.started_at = self.clock()
        self.last_tap_at = None
        logger.info("Pacing session started")

    def tap(self, syllable_count: int) -> bool:
        """Register one syllable tap for a word of ``syllable_count`` syllables.

        Returns:
            True when this tap completes the word.
        """
        if not self.is_active or self.word_complete:
            return False

        now = self.clock()
        if self.last_tap_at is not None:
            self.tap_times.append((now - self.last_tap_at) * 1000.0)
        self.last_tap_at = now

        self.current_tap += 1
        if self.current_tap >= syllable_count:
            self.word_complete = True
            self.words_completed += 1
        return self.word_complete

    def next_word(self) -> None:
        self.current_tap = 0
        self.word_complete = False
        self.last_tap_at = None

    def feedback(self):
        """(message, colour) for the current average pace."""
        return pace_feedback(len(self.tap_times), self.average_interval, self.target_ms)

    def end(self) -> Optional[dict]:
        """Finish the session, recording it when any interval was measured."""
        if not self.is_active:
            return None
        self.is_active = False
        if not self.tap_times:
            logger.info("Pacing session ended without intervals")
            return None

        duration = self.elapsed_seconds
        record = {
            "avg": self.average_interval,
            "count": len(self.tap_times),
            "duration": duration,
        }
        logger.info(f"Pacing session ended: {record}")
        if self.recorder:
            self.recorder.add_record("syllable_times", record)
            self.recorder.increment_session_counter("pacing_sessions")
            self.recorder.log_session(self.name, duration)
        return record

    def reset(self) -> None:
        """Discard the session without recording."""
        self.is_active = False
        self.tap_times = []
        self.current_tap = 0
        self.word_complete = False
        self.words_completed = 0
        self.started_at = None
        self.last_tap_at = None
