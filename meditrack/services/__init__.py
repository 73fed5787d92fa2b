"""Services layer for Meditrack application logic."""

from .publisher import SessionEventPublisher
from .session_service import SessionService
from .statistics_service import StatisticsService, STATISTICS_UPDATED_TOPIC

__all__ = [
    "SessionEventPublisher",
    "SessionService",
    "StatisticsService",
    "STATISTICS_UPDATED_TOPIC",
]
