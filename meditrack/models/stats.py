"""Statistics result models."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict

from .session import ChartPeriod


@dataclass(frozen=True)
class KpiSummary:
    """Aggregate KPIs over a set of sessions."""
    total_time: timedelta
    average_duration: timedelta
    session_count: int


@dataclass
class SessionStatistics:
    """All derived statistics for one session snapshot and chart period."""
    total_time: timedelta
    average_duration: timedelta
    current_streak: int
    longest_streak: int
    period: ChartPeriod
    session_count: int
    chart_buckets: Dict[str, int] = field(default_factory=dict)  # Sorted ascending by key
    computed_at: datetime = field(default_factory=datetime.now)
