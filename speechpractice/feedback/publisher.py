"""Publishes feedback and session events using pubsub.pub."""

import logging

from pubsub import pub

from ..models.events import BreathHoldRecord, SessionEvent, TargetHitEvent

logger = logging.getLogger(__name__)

TARGET_HIT_TOPIC = "feedback.target_hit"
BREATH_HOLD_TOPIC = "feedback.breath_hold"
SESSION_TOPIC = "session.state"


class FeedbackPublisher:
    """Sends exercise events to whoever subscribed to the feedback topics."""

    def __init__(
        self,
        target_hit_topic: str = TARGET_HIT_TOPIC,
        breath_hold_topic: str = BREATH_HOLD_TOPIC,
        session_topic: str = SESSION_TOPIC,
    ):
        self.target_hit_topic = target_hit_topic
        self.breath_hold_topic = breath_hold_topic
        self.session_topic = session_topic
        logger.info(f"FeedbackPublisher initialized with topics: "
                    f"{target_hit_topic}, {breath_hold_topic}, {session_topic}")

    def publish_target_hit(self, event: TargetHitEvent) -> None:
        pub.sendMessage(self.target_hit_topic, event=event)

    def publish_breath_hold(self, event: BreathHoldRecord) -> None:
        pub.sendMessage(self.breath_hold_topic, event=event)

    def publish_session_event(self, event: SessionEvent) -> None:
        logger.debug(f"Session event: {event.session_name} {event.event_type}")
        pub.sendMessage(self.session_topic, event=event)
