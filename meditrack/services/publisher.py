"""Session change publisher for pub/sub event publishing."""

import logging
from pubsub import pub

from ..models.events import SessionsChangedEvent, SESSIONS_CHANGED_TOPIC

logger = logging.getLogger(__name__)


class SessionEventPublisher:
    """Publishes session change events using pubsub.pub."""

    def __init__(self, topic: str = SESSIONS_CHANGED_TOPIC):
        """Initialize session event publisher.

        Args:
            topic: Pub/sub topic name for session change events
        """
        self.topic = topic
        logger.info(f"SessionEventPublisher initialized with topic: {topic}")

    def publish_change(self, reason: str, count: int = 1) -> None:
        """Publish a session change event to the pub/sub topic.

        Args:
            reason: What happened to the session set ("recorded", "deleted", "imported")
            count: Number of sessions affected
        """
        pub.sendMessage(self.topic, event=SessionsChangedEvent(reason=reason, count=count))
        logger.debug(f"Published session change: {reason} ({count})")
