"""Statistics service that recomputes session statistics on demand."""

import logging
from datetime import date
from typing import Callable, Dict, Optional, Tuple, Union
from pubsub import pub

from ..models.events import SessionsChangedEvent, SESSIONS_CHANGED_TOPIC
from ..models.session import ChartPeriod
from ..models.stats import SessionStatistics
from ..stats.engine import compute_statistics, parse_period
from ..storage.base import SessionRepository

logger = logging.getLogger(__name__)

STATISTICS_UPDATED_TOPIC = "statistics.updated"


class StatisticsService:
    """Keeps the statistics for the current chart period up to date.

    Statistics are recomputed from the full repository snapshot when a
    sessions-changed message arrives, when the chart period is switched, or
    when refresh() is called. Results are memoized per snapshot version,
    period and day.
    """

    def __init__(self,
                 repository: SessionRepository,
                 period: Union[ChartPeriod, str] = ChartPeriod.WEEKLY,
                 topic: str = SESSIONS_CHANGED_TOPIC,
                 today_provider: Callable[[], date] = date.today):
        """Initialize statistics service.

        Args:
            repository: Storage collaborator to take snapshots from
            period: Initial chart period
            topic: Topic announcing session changes
            today_provider: Returns the reference day for the current streak
        """
        self.repository = repository
        self.period = parse_period(period)
        self.topic = topic
        self.today_provider = today_provider

        self._snapshot = self.repository.list_sessions()
        self._snapshot_version = 0
        self._cache: Dict[Tuple[int, ChartPeriod, date], SessionStatistics] = {}
        self.statistics: Optional[SessionStatistics] = None

        pub.subscribe(self._on_sessions_changed, topic)
        logger.info(f"StatisticsService initialized - subscribed to {topic} "
                    f"({len(self._snapshot)} sessions, period: {self.period.value})")

    def _on_sessions_changed(self, event: SessionsChangedEvent) -> None:
        """Handle a session change by taking a fresh snapshot."""
        logger.debug(f"Sessions changed ({event.reason}, {event.count}), reloading snapshot")
        self.reload()

    def reload(self) -> SessionStatistics:
        """Take a new snapshot from the repository and recompute."""
        self._snapshot = self.repository.list_sessions()
        self._snapshot_version += 1
        self._cache.clear()
        return self.refresh()

    def set_period(self, period: Union[ChartPeriod, str]) -> SessionStatistics:
        """Switch the chart period and recompute."""
        self.period = parse_period(period)
        logger.info(f"Chart period set to {self.period.value}")
        return self.refresh()

    def refresh(self) -> SessionStatistics:
        """Compute statistics for the current snapshot and period.

        Publishes the result on the statistics-updated topic.
        """
        today = self.today_provider()
        key = (self._snapshot_version, self.period, today)

        stats = self._cache.get(key)
        if stats is None:
            stats = compute_statistics(self._snapshot, self.period, today)
            self._cache[key] = stats

        self.statistics = stats
        pub.sendMessage(STATISTICS_UPDATED_TOPIC, statistics=stats)
        return stats

    def close(self) -> None:
        """Stop listening for session changes."""
        if pub.isSubscribed(self._on_sessions_changed, self.topic):
            pub.unsubscribe(self._on_sessions_changed, self.topic)
        logger.info("StatisticsService unsubscribed")
