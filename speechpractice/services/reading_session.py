"""Reading-aloud session measuring per-sentence volume consistency."""

import logging
import threading
from typing import Dict, List, Optional, Sequence

from ..audio.capture import AudioCapture
from ..audio.loudness import estimate_loudness
from ..feedback.consistency import consistency_score, voiced_average
from ..models.audio import CaptureConstraints
from ..models.session import ReadingSummary, SessionConfig, SessionStatus
from .session_recorder import SessionRecorder
from .tick_loop import TaskHandle, TickLoop

logger = logging.getLogger(__name__)


class ReadingSession:
    """Collects raw loudness while the user reads sentence by sentence."""

    name = "reading"

    def __init__(
        self,
        capture: AudioCapture,
        sentences: Sequence[str],
        recorder: Optional[SessionRecorder] = None,
        config: Optional[SessionConfig] = None,
        tick_loop: Optional[TickLoop] = None,
        constraints: Optional[CaptureConstraints] = None,
        story_id: Optional[str] = None,
        story_title: Optional[str] = None,
    ):
        if not sentences:
            raise ValueError("A reading session needs at least one sentence")
        self.capture = capture
        self.sentences = list(sentences)
        self.recorder = recorder
        self.config = config or SessionConfig()
        self.tick_loop = tick_loop or TickLoop()
        self.constraints = constraints
        self.story_id = story_id
        self.story_title = story_title

        self.lock = threading.RLock()
        self.status = SessionStatus.IDLE
        self.stop_reason: Optional[str] = None
        self.handle: Optional[TaskHandle] = None
        self.finished = False

        self.sentence_index = 0
        self.current_volume = 0.0
        self.sentence_readings: List[float] = []
        self.sentence_averages: List[float] = []
        self.volume_history: List[Dict[str, float]] = []
        self.summary: Optional[ReadingSummary] = None

    @property
    def is_running(self) -> bool:
        return self.status is SessionStatus.RUNNING

    @property
    def current_sentence(self) -> str:
        return self.sentences[self.sentence_index]

    def start(self) -> None:
        """Open the microphone and start collecting loudness for sentence 1."""
        with self.lock:
            if self.is_running:
                logger.warning("Reading session already running")
                return
            self.capture.open(self.constraints)
            self.sentence_index = 0
            self.current_volume = 0.0
            self.sentence_readings = []
            self.sentence_averages = []
            self.volume_history = []
            self.summary = None
            self.stop_reason = None
            self.finished = False
            self.status = SessionStatus.RUNNING
        logger.info(f"Reading session started: {len(self.sentences)} sentences")
        self.handle = self.tick_loop.start(self.tick)

    def tick(self) -> Optional[float]:
        """Sample raw loudness into the current sentence. Never raises."""
        with self.lock:
            if not self.is_running:
                return None
            try:
                frame = self.capture.poll()
                volume = estimate_loudness(frame.bins, self.config.sensitivity_boost)
            except Exception as e:
                logger.error(f"Reading session failed: {e}")
                self.stop_reason = f"{type(e).__name__}: {e}"
                self._release()
                return None
            self.current_volume = volume
            self.sentence_readings.append(volume)
            return volume

    def next_sentence(self) -> bool:
        """Close out the current sentence.

        Returns:
            True while sentences remain; False once the last one was read
            and the session has been finished.
        """
        with self.lock:
            if not self.is_running:
                return False
            average = voiced_average(self.sentence_readings)
            if average is not None:
                self.sentence_averages.append(average)
                self.volume_history.append({
                    "sentence": self.sentence_index + 1,
                    "volume": round(average, 1),
                })
            else:
                logger.debug(f"Sentence {self.sentence_index + 1} had no voiced readings")
            self.sentence_readings = []

            if self.sentence_index < len(self.sentences) - 1:
                self.sentence_index += 1
                return True

        self.finish()
        return False

    def finish(self) -> Optional[ReadingSummary]:
        """Stop listening, score the session and record it.

        Only the first call records; later calls, or a call after stop(),
        return the existing summary.
        """
        self._cancel_loop()
        with self.lock:
            if self.finished:
                return self.summary
            self.finished = True
            if self.is_running:
                self._release()
            score = consistency_score(self.sentence_averages)
            if score is None:
                logger.info("Reading finished with too few voiced sentences to score")
                return None
            mean = sum(self.sentence_averages) / len(self.sentence_averages)
            self.summary = ReadingSummary(
                consistency_score=score,
                average_volume=int(round(mean)),
                sentences_read=len(self.sentence_averages),
                volume_history=list(self.volume_history),
                story_id=self.story_id,
                story_title=self.story_title,
            )

        logger.info(f"Reading finished: consistency {self.summary.consistency_score}, "
                    f"average volume {self.summary.average_volume}")
        if self.recorder:
            self.recorder.record_reading_session(self.summary.to_record())
        return self.summary

    def stop(self) -> None:
        """Abandon the session without recording anything."""
        self._cancel_loop()
        with self.lock:
            self.finished = True
            if self.is_running:
                self._release()
        logger.info("Reading session stopped")

    def _cancel_loop(self) -> None:
        with self.lock:
            handle, self.handle = self.handle, None
        if handle:
            handle.cancel()

    def _release(self) -> None:
        if self.handle:
            self.handle.cancel()
            self.handle = None
        self.capture.close()
        self.status = SessionStatus.STOPPED
        self.current_volume = 0.0
