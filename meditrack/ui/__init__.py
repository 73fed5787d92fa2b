"""Terminal user interface for Meditrack."""

from .stats_view import StatisticsView, format_duration, format_streak, format_session_length

__all__ = [
    "StatisticsView",
    "format_duration",
    "format_streak",
    "format_session_length",
]
