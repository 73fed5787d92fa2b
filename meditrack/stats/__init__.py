"""Statistics engine for meditation sessions."""

from .engine import (
    activity_day,
    activity_days,
    compute_kpis,
    current_streak,
    longest_streak,
    week_key,
    aggregate_chart_data,
    compute_statistics,
    parse_period,
    to_local_naive,
)

__all__ = [
    "activity_day",
    "activity_days",
    "compute_kpis",
    "current_streak",
    "longest_streak",
    "week_key",
    "aggregate_chart_data",
    "compute_statistics",
    "parse_period",
    "to_local_naive",
]
