"""Live loudness biofeedback session: capture, estimate, smooth, evaluate."""

import logging
import threading
import time
from typing import Callable, Optional

from ..audio.capture import AudioCapture
from ..audio.loudness import estimate_loudness
from ..audio.smoothing import LoudnessSmoother
from ..feedback.publisher import FeedbackPublisher
from ..feedback.threshold import BreathHoldTracker, TargetHitTracker
from ..models.audio import AudioFrame, CaptureConstraints
from ..models.events import BreathHoldRecord, SessionEvent, TargetHitEvent
from ..models.session import LoudnessReading, SessionConfig, SessionStatus
from .tick_loop import TaskHandle, TickLoop

logger = logging.getLogger(__name__)


class LoudnessSession:
    """One loudness-meter session over an exclusively owned capture.

    Filter and hysteresis state exist only while the session runs. They are
    created on start() after the microphone opens and discarded on stop, so
    a restart always behaves as a cold start.
    """

    name = "loudness"

    def __init__(
        self,
        capture: AudioCapture,
        config: Optional[SessionConfig] = None,
        publisher: Optional[FeedbackPublisher] = None,
        tick_loop: Optional[TickLoop] = None,
        constraints: Optional[CaptureConstraints] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.capture = capture
        self.config = config or SessionConfig()
        self.publisher = publisher or FeedbackPublisher()
        self.tick_loop = tick_loop or TickLoop()
        self.constraints = constraints
        self.clock = clock

        self.lock = threading.RLock()
        self.status = SessionStatus.IDLE
        self.stop_reason: Optional[str] = None
        self.handle: Optional[TaskHandle] = None

        self.smoother: Optional[LoudnessSmoother] = None
        self.hit_tracker: Optional[TargetHitTracker] = None
        self.breath_tracker: Optional[BreathHoldTracker] = None
        self.breath_exercise = False

        self.started_at: Optional[float] = None
        self.last_tick_at: Optional[float] = None
        self.last_reading: Optional[LoudnessReading] = None

    @property
    def is_running(self) -> bool:
        return self.status is SessionStatus.RUNNING

    @property
    def targets_hit(self) -> int:
        return self.hit_tracker.hits if self.hit_tracker else 0

    @property
    def elapsed_seconds(self) -> float:
        if self.started_at is None or not self.is_running:
            return 0.0
        return self.clock() - self.started_at

    def start(self) -> None:
        """Open the microphone and begin processing frames.

        Raises:
            PermissionDenied: The OS refused microphone access
            DeviceUnavailable: No usable input device exists
        """
        with self.lock:
            if self.is_running:
                logger.warning("Loudness session already running")
                return

            self.capture.open(self.constraints)

            self.smoother = LoudnessSmoother(self.config.smoothing_factor)
            self.hit_tracker = TargetHitTracker()
            self.breath_tracker = BreathHoldTracker()
            self.breath_exercise = False
            self.stop_reason = None
            self.started_at = self.clock()
            self.last_tick_at = None
            self.last_reading = None
            self.status = SessionStatus.RUNNING

        logger.info(f"Loudness session started: target {self.config.target_volume}, "
                    f"boost {self.config.sensitivity_boost}x")
        self.publisher.publish_session_event(SessionEvent(
            session_name=self.name,
            event_type="started",
            metadata={
                "target_volume": self.config.target_volume,
                "sensitivity_boost": self.config.sensitivity_boost,
            },
        ))
        self.handle = self.tick_loop.start(self.tick)

    def tick(self) -> Optional[LoudnessReading]:
        """Process one frame. Never raises; failures stop the session."""
        with self.lock:
            if not self.is_running:
                return None
            try:
                reading, hit, hold = self._process_frame(self.capture.poll())
                self.last_reading = reading
                if hit:
                    self.publisher.publish_target_hit(hit)
                if hold:
                    self.publisher.publish_breath_hold(hold)
            except Exception as e:
                logger.error(f"Loudness session failed: {e}")
                self._halt(f"{type(e).__name__}: {e}")
                return None
        return reading

    def _process_frame(self, frame: AudioFrame):
        now = self.clock()
        elapsed = 0.0 if self.last_tick_at is None else now - self.last_tick_at
        self.last_tick_at = now

        config = self.config
        raw = estimate_loudness(frame.bins, config.sensitivity_boost)
        smoothed = self.smoother.update(raw)
        target = config.target_volume

        hit = None
        if self.hit_tracker.update(smoothed, target):
            hit = TargetHitEvent(
                timestamp=frame.timestamp,
                loudness=smoothed,
                target=target,
                hit_number=self.hit_tracker.hits,
            )

        hold = None
        if self.breath_exercise:
            duration = self.breath_tracker.update(smoothed, target, elapsed)
            if duration is not None:
                hold = BreathHoldRecord(duration=duration)

        reading = LoudnessReading(
            raw=raw,
            smoothed=smoothed,
            target=target,
            above_target=smoothed >= target,
            targets_hit=self.hit_tracker.hits,
            breath_holding=self.breath_exercise and self.breath_tracker.holding,
            breath_hold_time=self.breath_tracker.hold_time if self.breath_exercise else 0.0,
            best_breath_hold=self.breath_tracker.best,
        )
        return reading, hit, hold

    def start_breath_exercise(self) -> None:
        """Begin timing sustained phonation; resets the session best."""
        with self.lock:
            if not self.is_running:
                logger.warning("Cannot start breath exercise without a running session")
                return
            self.breath_tracker.reset()
            self.breath_exercise = True
        logger.info("Breath hold exercise started")

    def stop_breath_exercise(self) -> float:
        """Stop timing holds and return the best hold of the exercise."""
        with self.lock:
            if not self.breath_tracker:
                return 0.0
            best = self.breath_tracker.best
            self.breath_tracker.reset()
            self.breath_exercise = False
        logger.info(f"Breath hold exercise stopped, best {best:.1f}s")
        return best

    def update_config(self, **changes) -> SessionConfig:
        """Swap in new settings; applies from the next tick."""
        with self.lock:
            if self.is_running and "smoothing_factor" in changes:
                raise ValueError("smoothing_factor cannot change during a session")
            self.config = self.config.with_updates(**changes)
            logger.debug(f"Session config updated: {self.config}")
            return self.config

    def stop(self) -> None:
        """Halt the loop, release the microphone and discard filter state."""
        with self.lock:
            handle, self.handle = self.handle, None
        if handle:
            handle.cancel()

        with self.lock:
            if not self.is_running:
                return
            metadata = self._summary()
            self.capture.close()
            self._discard_state()
            self.status = SessionStatus.STOPPED

        logger.info(f"Loudness session stopped after {metadata['duration_seconds']}s, "
                    f"{metadata['targets_hit']} targets hit")
        self.publisher.publish_session_event(SessionEvent(
            session_name=self.name, event_type="stopped", metadata=metadata))

    def _halt(self, reason: str) -> None:
        """Stop from inside the tick; the caller holds the session lock."""
        if self.handle:
            self.handle.cancel()
            self.handle = None
        metadata = self._summary()
        metadata["reason"] = reason
        self.capture.close()
        self._discard_state()
        self.status = SessionStatus.STOPPED
        self.stop_reason = reason
        self.publisher.publish_session_event(SessionEvent(
            session_name=self.name, event_type="error", metadata=metadata))

    def _summary(self) -> dict:
        return {
            "duration_seconds": int(self.clock() - self.started_at),
            "targets_hit": self.targets_hit,
            "breath_exercise": self.breath_exercise,
            "best_breath_hold": self.breath_tracker.best if self.breath_tracker else 0.0,
        }

    def _discard_state(self) -> None:
        self.smoother = None
        self.hit_tracker = None
        self.breath_tracker = None
        self.breath_exercise = False
        self.last_tick_at = None
