"""Event models published over pypubsub."""

from dataclasses import dataclass, field
from datetime import datetime

SESSIONS_CHANGED_TOPIC = "sessions.changed"


@dataclass
class SessionsChangedEvent:
    """Published whenever the stored session set changes."""
    reason: str  # "recorded", "deleted", "imported"
    count: int = 1  # Number of sessions affected
    timestamp: datetime = field(default_factory=datetime.now)
