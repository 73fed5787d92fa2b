"""Data models for the Meditrack application."""

from .session import Session, ChartPeriod
from .stats import KpiSummary, SessionStatistics
from .events import SessionsChangedEvent, SESSIONS_CHANGED_TOPIC
from .transfer import ImportReport

__all__ = [
    "Session",
    "ChartPeriod",
    "KpiSummary",
    "SessionStatistics",
    "SessionsChangedEvent",
    "SESSIONS_CHANGED_TOPIC",
    "ImportReport",
]
