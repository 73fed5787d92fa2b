"""Statistics engine computing KPIs, streaks and chart buckets from sessions.

All functions are pure: they take a snapshot of sessions (any order), never
mutate it, and return freshly computed values. Calendar days are always the
local calendar date of a session's timestamp.
"""

import logging
from collections import defaultdict
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List, Optional, Set, Union

from ..models.session import ChartPeriod, Session
from ..models.stats import KpiSummary, SessionStatistics

logger = logging.getLogger(__name__)

ONE_DAY = timedelta(days=1)


def activity_day(timestamp: datetime) -> date:
    """Get the local calendar date of a timestamp.

    Naive timestamps are taken to be local time already; aware timestamps
    are converted to the system local zone first.
    """
    if timestamp.tzinfo is not None:
        timestamp = timestamp.astimezone()
    return timestamp.date()


def to_local_naive(timestamp: datetime) -> datetime:
    """Convert an aware timestamp to naive local time; naive ones pass through."""
    if timestamp.tzinfo is None:
        return timestamp
    return timestamp.astimezone().replace(tzinfo=None)


def activity_days(sessions: Iterable[Session]) -> Set[date]:
    """Reduce sessions to the set of unique local days with activity."""
    return {activity_day(s.timestamp) for s in sessions}


def compute_kpis(sessions: Iterable[Session]) -> KpiSummary:
    """Compute total time and average session duration.

    Args:
        sessions: Sessions in any order, may be empty

    Returns:
        KpiSummary; zero durations when there are no sessions
    """
    total_seconds = 0
    count = 0
    for session in sessions:
        total_seconds += session.duration_seconds
        count += 1

    if count == 0:
        return KpiSummary(total_time=timedelta(0), average_duration=timedelta(0), session_count=0)

    # Nearest second, ties round up
    average_seconds = (2 * total_seconds + count) // (2 * count)
    return KpiSummary(
        total_time=timedelta(seconds=total_seconds),
        average_duration=timedelta(seconds=average_seconds),
        session_count=count,
    )


def current_streak(sessions: Iterable[Session], today: Optional[date] = None) -> int:
    """Count consecutive activity days ending today or yesterday.

    Args:
        sessions: Sessions in any order
        today: Reference day, defaults to the local date now

    Returns:
        Streak length in days, 0 if the latest activity is older than yesterday
    """
    days = activity_days(sessions)
    if not days:
        return 0

    if today is None:
        today = date.today()

    most_recent = max(days)
    if most_recent != today and most_recent != today - ONE_DAY:
        return 0

    streak = 0
    expected = most_recent
    while expected in days:
        streak += 1
        expected -= ONE_DAY
    return streak


def longest_streak(sessions: Iterable[Session]) -> int:
    """Find the longest run of consecutive activity days over all history."""
    days: List[date] = sorted(activity_days(sessions))
    if not days:
        return 0

    longest = 0
    run_length = 1
    for previous, day in zip(days, days[1:]):
        if day - previous == ONE_DAY:
            run_length += 1
        else:
            longest = max(longest, run_length)
            run_length = 1
    return max(longest, run_length)


def week_key(day: date) -> str:
    """ISO-8601 week label, e.g. ``2025-W01`` for 2024-12-30."""
    iso_year, iso_week, _ = day.isocalendar()
    return f"{iso_year}-W{iso_week:02d}"


def bucket_key(timestamp: datetime, period: ChartPeriod) -> str:
    """Get the chart bucket label for a timestamp."""
    day = activity_day(timestamp)
    if period is ChartPeriod.DAILY:
        return day.isoformat()
    if period is ChartPeriod.WEEKLY:
        return week_key(day)
    return f"{day.year:04d}-{day.month:02d}"


def parse_period(period: Union[ChartPeriod, str]) -> ChartPeriod:
    """Accept a ChartPeriod or its string value ("daily", "weekly", "monthly")."""
    if isinstance(period, ChartPeriod):
        return period
    try:
        return ChartPeriod(str(period).lower())
    except ValueError:
        valid = ", ".join(p.value for p in ChartPeriod)
        raise ValueError(f"Unknown chart period '{period}' (expected one of: {valid})")


def aggregate_chart_data(sessions: Iterable[Session],
                         period: Union[ChartPeriod, str]) -> Dict[str, int]:
    """Total meditation seconds per day, ISO week or month.

    Args:
        sessions: Sessions in any order
        period: Bucket size

    Returns:
        Mapping of bucket label to total seconds, sorted ascending by label
    """
    period = parse_period(period)
    totals: Dict[str, int] = defaultdict(int)
    for session in sessions:
        totals[bucket_key(session.timestamp, period)] += session.duration_seconds

    return {key: totals[key] for key in sorted(totals)}


def compute_statistics(sessions: Iterable[Session],
                       period: Union[ChartPeriod, str] = ChartPeriod.WEEKLY,
                       today: Optional[date] = None) -> SessionStatistics:
    """Recompute every statistic from a full session snapshot.

    Args:
        sessions: Snapshot of all sessions
        period: Chart bucket size
        today: Reference day for the current streak

    Returns:
        SessionStatistics for the snapshot
    """
    snapshot = list(sessions)
    period = parse_period(period)

    kpis = compute_kpis(snapshot)
    stats = SessionStatistics(
        total_time=kpis.total_time,
        average_duration=kpis.average_duration,
        current_streak=current_streak(snapshot, today),
        longest_streak=longest_streak(snapshot),
        period=period,
        session_count=kpis.session_count,
        chart_buckets=aggregate_chart_data(snapshot, period),
    )

    logger.debug(f"Computed statistics for {len(snapshot)} sessions ({period.value}): "
                 f"total={stats.total_time}, streak={stats.current_streak}/{stats.longest_streak}, "
                 f"buckets={len(stats.chart_buckets)}")
    return stats
