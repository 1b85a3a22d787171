"""Turns exercise results into persisted statistics."""

import logging
from typing import Any, Dict

from pubsub import pub

from ..feedback.publisher import BREATH_HOLD_TOPIC, SESSION_TOPIC
from ..models.events import BreathHoldRecord, SessionEvent
from ..storage.stats_store import StatsStore

logger = logging.getLogger(__name__)

STORE_ERRORS = (OSError, TypeError, ValueError)


class SessionRecorder:
    """Writes practice results to the stats store.

    Every call is fire-and-forget: store failures are logged, never raised,
    so an exercise loop is never interrupted by persistence problems.
    """

    def __init__(self, store: StatsStore, subscribe: bool = True,
                 breath_hold_topic: str = BREATH_HOLD_TOPIC,
                 session_topic: str = SESSION_TOPIC):
        """Initialize the recorder.

        Args:
            store: Statistics store to write to
            subscribe: Listen for loudness events on the pub/sub topics
            breath_hold_topic: Topic carrying BreathHoldRecord events
            session_topic: Topic carrying SessionEvent lifecycle events
        """
        self.store = store
        self.breath_hold_topic = breath_hold_topic
        self.session_topic = session_topic
        self.subscribed = False

        if subscribe:
            pub.subscribe(self._on_breath_hold, breath_hold_topic)
            pub.subscribe(self._on_session_event, session_topic)
            self.subscribed = True
            logger.info(f"SessionRecorder subscribed to {breath_hold_topic}, {session_topic}")

    def _on_breath_hold(self, event: BreathHoldRecord) -> None:
        self.record_breath_hold(event.duration)

    def _on_session_event(self, event: SessionEvent) -> None:
        if event.session_name != "loudness" or event.event_type == "started":
            return
        if event.event_type == "error":
            logger.warning(f"Loudness session ended early: {event.metadata.get('reason')}")

        duration = int(event.metadata.get("duration_seconds", 0))
        if duration <= 0:
            return
        self.increment_session_counter("loudness_sessions")
        self.log_session("loudness", duration)
        targets_hit = event.metadata.get("targets_hit", 0)
        if targets_hit > 0:
            self.increment_session_counter("volume_targets_hit", targets_hit)

    def record_breath_hold(self, duration: float) -> None:
        self.add_record("breath_hold_records", {"duration": round(duration, 1)})

    def increment_session_counter(self, name: str, amount: float = 1) -> None:
        try:
            self.store.increment(name, amount)
        except STORE_ERRORS as e:
            logger.error(f"Failed to increment {name}: {e}")

    def add_record(self, key: str, record: Dict[str, Any]) -> None:
        try:
            self.store.add_record(key, record)
        except STORE_ERRORS as e:
            logger.error(f"Failed to add {key} record: {e}")

    def record_reading_session(self, session_data: Dict[str, Any]) -> None:
        try:
            self.store.add_reading_session(session_data)
        except STORE_ERRORS as e:
            logger.error(f"Failed to record reading session: {e}")

    def log_session(self, tool: str, duration_seconds: float) -> None:
        try:
            self.store.log_session(tool, duration_seconds)
        except STORE_ERRORS as e:
            logger.error(f"Failed to log {tool} session: {e}")

    def close(self) -> None:
        """Stop listening for events."""
        if self.subscribed:
            pub.unsubscribe(self._on_breath_hold, self.breath_hold_topic)
            pub.unsubscribe(self._on_session_event, self.session_topic)
            self.subscribed = False
