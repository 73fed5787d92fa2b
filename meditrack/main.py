"""Main application entry point for Meditrack."""

import sys
import argparse
import calendar
import logging
from datetime import date, datetime
from pathlib import Path
from typing import List, Optional

from rich.console import Console

from . import __version__
from .config import MeditrackConfig, reload_config
from .services.session_service import SessionService
from .services.statistics_service import StatisticsService
from .storage.json_store import JsonSessionStore
from .ui.stats_view import StatisticsView

logger = logging.getLogger(__name__)

LOG_FILE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
LOG_CONSOLE_FORMAT = '%(levelname)s: %(message)s'


class App:
    """Wires configuration, storage, services and the terminal view together."""

    def __init__(self, config_path: Optional[str] = None, log_level: Optional[str] = None,
                 console: Optional[Console] = None):
        # Load configuration
        self.config = reload_config(config_path)
        # Set up logging (command line overrides config)
        level = log_level or self.config.get('logging.level', 'INFO')
        setup_logging(self.config, level)
        self.console = console or Console()

    def init(self) -> None:
        logger.info("Initializing services...")

        self.repository = JsonSessionStore(self.config.get_data_directory())
        self.session_service = SessionService(self.config, self.repository)
        self.statistics_service = StatisticsService(
            self.repository,
            period=self.config.get('statistics.default_period', 'weekly'),
        )
        self.view = StatisticsView(self.console)

    def show_stats(self, period: Optional[str] = None) -> None:
        if period:
            stats = self.statistics_service.set_period(period)
        else:
            stats = self.statistics_service.refresh()
        self.view.render_statistics(stats)

    def log_session(self, minutes: float, notes: Optional[str] = None,
                    at: Optional[datetime] = None) -> None:
        seconds = int(round(minutes * 60))
        session = self.session_service.record_session(seconds, timestamp=at, notes=notes)
        if session is None:
            self.console.print(
                f"Session too short (minimum {self.session_service.min_session_seconds} seconds). Not saved.",
                style="yellow")
            return
        self.console.print("✅ Meditation session saved!", style="green")
        self.view.render_kpis(self.statistics_service.statistics)

    def show_day(self, day: date) -> None:
        self.view.render_day(day, self.session_service.sessions_for_day(day))

    def show_calendar(self, year: int, month: int) -> None:
        first = date(year, month, 1)
        last = date(year, month, calendar.monthrange(year, month)[1])
        self.view.render_calendar(year, month, self.session_service.sessions_by_day(first, last))

    def export(self, directory: Optional[str] = None) -> None:
        path = self.session_service.export_file(directory)
        if path is None:
            self.console.print("No data to export.", style="yellow")
        else:
            self.console.print(f"Data exported successfully to {path}", style="green")

    def import_file(self, path: str) -> None:
        report = self.session_service.import_file(path)
        self.console.print(report.message, style="green")

    def cleanup(self) -> None:
        if hasattr(self, 'statistics_service'):
            self.statistics_service.close()


def setup_logging(config: MeditrackConfig, level: str = "INFO") -> None:
    """Send log records to the Meditrack log file, plus warnings to stderr if enabled.

    The log file receives every record that passes ``level``. Stderr only
    shows warnings so that command output on stdout stays readable.

    Args:
        config: Configuration providing the ``logging.*`` keys
        level: Root level name; the command line value wins over the config
    """
    log_path = Path(config.get('logging.file_path', 'data/logs/meditrack.log'))
    log_path.parent.mkdir(parents=True, exist_ok=True)

    file_handler = logging.FileHandler(log_path, encoding='utf-8')
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(LOG_FILE_FORMAT))
    handlers: List[logging.Handler] = [file_handler]

    if config.get('logging.console_output', True):
        warnings_handler = logging.StreamHandler(sys.stderr)
        warnings_handler.setLevel(logging.WARNING)
        warnings_handler.setFormatter(logging.Formatter(LOG_CONSOLE_FORMAT))
        handlers.append(warnings_handler)

    # Repeated App() construction in one process must not stack handlers
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, level.upper()))
    for handler in handlers:
        root_logger.addHandler(handler)

    logger.info(f"Meditrack {__version__} logging to {log_path} at {level.upper()}")


def _parse_day(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid date '{value}' (expected YYYY-MM-DD)")


def _parse_month(value: str) -> date:
    try:
        return datetime.strptime(value, "%Y-%m").date()
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid month '{value}' (expected YYYY-MM)")


def _parse_datetime(value: str) -> datetime:
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid timestamp '{value}' (expected ISO-8601)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Meditrack - Meditation session tracker",
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to configuration YAML file (default: meditrack.yaml if present)"
    )

    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set logging level (default: from config, INFO)"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"Meditrack v{__version__}"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    stats_parser = subparsers.add_parser("stats", help="Show KPIs, streaks and chart totals")
    stats_parser.add_argument("--period", choices=["daily", "weekly", "monthly"],
                              help="Chart period (default: from config)")

    log_parser = subparsers.add_parser("log", help="Record a meditation session")
    log_parser.add_argument("minutes", type=float, help="Session length in minutes")
    log_parser.add_argument("--notes", type=str, help="Free text notes")
    log_parser.add_argument("--at", type=_parse_datetime, help="Session time (default: now)")

    day_parser = subparsers.add_parser("day", help="List the sessions of one day")
    day_parser.add_argument("date", nargs="?", type=_parse_day, help="YYYY-MM-DD (default: today)")

    calendar_parser = subparsers.add_parser("calendar", help="Show a month with meditation days marked")
    calendar_parser.add_argument("month", nargs="?", type=_parse_month, help="YYYY-MM (default: this month)")

    export_parser = subparsers.add_parser("export", help="Export all sessions to JSON")
    export_parser.add_argument("--dir", type=str, help="Target directory (default: data/exports)")

    import_parser = subparsers.add_parser("import", help="Import sessions from a JSON export")
    import_parser.add_argument("file", type=str, help="Export file to import")

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for Meditrack application."""
    args = build_parser().parse_args(argv)

    app = None
    try:
        app = App(args.config, args.log_level)
        app.init()
        if args.command == "stats":
            app.show_stats(args.period)
        elif args.command == "log":
            app.log_session(args.minutes, notes=args.notes, at=args.at)
        elif args.command == "day":
            app.show_day(args.date or date.today())
        elif args.command == "calendar":
            month = args.month or date.today()
            app.show_calendar(month.year, month.month)
        elif args.command == "export":
            app.export(args.dir)
        elif args.command == "import":
            app.import_file(args.file)
    except KeyboardInterrupt:
        print("\n👋 Goodbye!")
    except Exception as e:
        print(f"❌ Error: {e}")
        logging.error(f"Application error: {e}")
        sys.exit(1)
    finally:
        if app is not None:
            app.cleanup()


if __name__ == "__main__":
    main()
