"""Terminal rendering of statistics and calendar days."""

import calendar
import logging
from datetime import date, timedelta
from typing import Dict, List, Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..models.session import ChartPeriod, Session
from ..models.stats import SessionStatistics

logger = logging.getLogger(__name__)

BAR_WIDTH = 30


def format_duration(duration: timedelta) -> str:
    """Format as "1h 5m", or "5m" when under an hour."""
    total_seconds = int(duration.total_seconds())
    hours, remainder = divmod(total_seconds, 3600)
    minutes = remainder // 60
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{total_seconds // 60}m"


def format_session_length(total_seconds: int) -> str:
    """Format as "12m 5s"."""
    return f"{total_seconds // 60}m {total_seconds % 60}s"


def format_streak(days: int) -> str:
    return f"{days} Day{'' if days == 1 else 's'}"


def short_label(key: str, period: ChartPeriod) -> str:
    """Drop the year from daily and weekly labels (MM-DD, Www); months keep it."""
    if period is ChartPeriod.MONTHLY:
        return key
    return key[5:]


class StatisticsView:
    """Renders statistics with rich."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def render_kpis(self, stats: SessionStatistics) -> None:
        table = Table(title="Meditation Statistics", show_header=False)
        table.add_column("KPI", style="bold")
        table.add_column("Value", justify="right")
        table.add_row("⏱️  Total Time", format_duration(stats.total_time))
        table.add_row("⌛ Average Session", format_duration(stats.average_duration))
        table.add_row("🔥 Current Streak", format_streak(stats.current_streak))
        table.add_row("⭐ Longest Streak", format_streak(stats.longest_streak))
        self.console.print(table)

    def render_chart(self, stats: SessionStatistics) -> None:
        if not stats.chart_buckets:
            self.console.print(Panel("No meditation data yet.", title=stats.period.value.title()))
            return

        peak = max(stats.chart_buckets.values()) or 1
        table = Table(title=f"{stats.period.value.title()} totals")
        table.add_column("Period")
        table.add_column("Minutes", justify="right")
        table.add_column("")
        for key, seconds in stats.chart_buckets.items():
            bar = "█" * int(round(seconds / peak * BAR_WIDTH))
            table.add_row(short_label(key, stats.period), f"{seconds / 60:.0f}", f"[cyan]{bar}[/cyan]")
        self.console.print(table)

    def render_statistics(self, stats: SessionStatistics) -> None:
        """Render KPI table followed by the chart for the stats' period."""
        self.render_kpis(stats)
        self.console.print()
        self.render_chart(stats)

    def render_day(self, day: date, sessions: List[Session]) -> None:
        """List the sessions of one calendar day."""
        self.console.print(f"📅 {day.strftime('%A, %d %B %Y')}", style="bold blue")
        if not sessions:
            self.console.print("   No sessions on this day.", style="yellow")
            return
        for session in sessions:
            line = f"   {session.timestamp.strftime('%H:%M')}  {format_session_length(session.duration_seconds)}"
            if session.notes:
                line += f"  - {session.notes}"
            self.console.print(line)

    def render_calendar(self, year: int, month: int, by_day: Dict[date, List[Session]]) -> None:
        """Month grid with days that have sessions marked, then a per-day summary."""
        table = Table(title=date(year, month, 1).strftime('%B %Y'))
        for name in ("Mo", "Tu", "We", "Th", "Fr", "Sa", "Su"):
            table.add_column(name, justify="right")

        for week in calendar.Calendar(firstweekday=0).monthdatescalendar(year, month):
            cells = []
            for day in week:
                if day.month != month:
                    cells.append("")
                elif day in by_day:
                    cells.append(f"[bold green]●{day.day}[/bold green]")
                else:
                    cells.append(str(day.day))
            table.add_row(*cells)
        self.console.print(table)

        marked = sorted(day for day in by_day if (day.year, day.month) == (year, month))
        if not marked:
            self.console.print("No sessions this month.", style="yellow")
            return
        for day in marked:
            sessions = by_day[day]
            total = sum(s.duration_seconds for s in sessions)
            self.console.print(f"   {day.isoformat()}  {len(sessions)} session(s), "
                               f"{format_duration(timedelta(seconds=total))}")
