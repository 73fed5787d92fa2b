"""Session-related data models."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class ChartPeriod(Enum):
    """Aggregation period for chart buckets."""
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


@dataclass(frozen=True)
class Session:
    """One recorded meditation session."""
    timestamp: datetime
    duration_seconds: int
    notes: Optional[str] = None
