"""Session service for recording, browsing, importing and exporting sessions."""

import logging
from collections import defaultdict
from datetime import date, datetime
from pathlib import Path
from typing import Dict, List, Optional, Union

from ..config import MeditrackConfig
from ..models.session import Session
from ..models.transfer import ImportReport
from ..stats.engine import activity_day, to_local_naive
from ..storage.base import SessionRepository
from ..storage.session_transfer import (
    SessionImportError,
    dumps_sessions,
    export_filename,
    loads_sessions,
)
from .publisher import SessionEventPublisher

logger = logging.getLogger(__name__)


class SessionService:
    """High-level API over the session repository.

    Every change to the stored session set is announced on the
    sessions-changed topic so that statistics can be recomputed.
    """

    def __init__(self,
                 config: MeditrackConfig,
                 repository: SessionRepository,
                 publisher: Optional[SessionEventPublisher] = None):
        """Initialize session service.

        Args:
            config: Application configuration
            repository: Storage collaborator holding the sessions
            publisher: Change event publisher, a default one if None
        """
        self.config = config
        self.repository = repository
        self.publisher = publisher or SessionEventPublisher()
        self.min_session_seconds = config.get_min_session_seconds()
        self.exports_dir = Path(config.get_data_directory()) / "exports"

        logger.info(f"SessionService initialized (min session: {self.min_session_seconds}s)")

    def record_session(self,
                       duration_seconds: int,
                       timestamp: Optional[datetime] = None,
                       notes: Optional[str] = None) -> Optional[Session]:
        """Save a finished meditation session.

        Args:
            duration_seconds: Length of the session
            timestamp: When the session happened, now if None
            notes: Optional free text

        Returns:
            The stored Session, or None if it was shorter than the minimum
        """
        if duration_seconds < 0:
            raise ValueError(f"Session duration must be >= 0, got {duration_seconds}")

        if duration_seconds < self.min_session_seconds:
            logger.info(f"Session too short ({duration_seconds}s < {self.min_session_seconds}s), not saved")
            return None

        session = Session(
            timestamp=to_local_naive(timestamp) if timestamp else datetime.now(),
            duration_seconds=int(duration_seconds),
            notes=notes,
        )
        self.repository.insert_session(session)
        self.publisher.publish_change("recorded")
        return session

    def delete_session(self, timestamp: datetime) -> bool:
        """Delete the session recorded at timestamp."""
        deleted = self.repository.delete_session(timestamp)
        if deleted:
            self.publisher.publish_change("deleted")
        return deleted

    def list_sessions(self) -> List[Session]:
        """All sessions, newest first."""
        return self.repository.list_sessions()

    def sessions_by_day(self,
                        start: Optional[date] = None,
                        end: Optional[date] = None) -> Dict[date, List[Session]]:
        """Group sessions by local calendar day, for calendar markers.

        Args:
            start: First day to include, unbounded if None
            end: Last day to include (inclusive), unbounded if None
        """
        if start is None and end is None:
            sessions = self.repository.list_sessions()
        else:
            sessions = self.repository.sessions_in_range(start or date.min, end or date.max)

        grouped: Dict[date, List[Session]] = defaultdict(list)
        for session in sessions:
            grouped[activity_day(session.timestamp)].append(session)
        return dict(grouped)

    def sessions_for_day(self, day: date) -> List[Session]:
        """Sessions on one local calendar day, newest first."""
        return self.repository.sessions_for_date(day)

    def import_text(self, text: str) -> ImportReport:
        """Import sessions from the text of an export document.

        Sessions whose timestamp is already stored, or repeated within the
        document, are skipped as duplicates.

        Raises:
            SessionImportError: if the document is not a valid export container
        """
        sessions, failed = loads_sessions(text)
        report = ImportReport(failed=failed)

        seen = set()
        for session in sessions:
            if session.timestamp in seen or self.repository.session_exists(session.timestamp):
                report.skipped_duplicates += 1
                logger.debug(f"Skipping duplicate session at {session.timestamp.isoformat()}")
                continue
            seen.add(session.timestamp)
            self.repository.insert_session(session)
            report.added += 1

        logger.info(report.message)
        if report.added > 0:
            self.publisher.publish_change("imported", report.added)
        return report

    def import_file(self, path: Union[str, Path]) -> ImportReport:
        """Import sessions from an export file.

        Raises:
            SessionImportError: if the file cannot be read or is not a valid export
        """
        path = Path(path)
        try:
            text = path.read_text(encoding='utf-8')
        except OSError as e:
            logger.error(f"Error reading import file {path}: {e}")
            raise SessionImportError(f"Cannot read {path}: {e}") from e

        logger.info(f"Importing sessions from {path}")
        return self.import_text(text)

    def export_file(self, directory: Optional[Union[str, Path]] = None) -> Optional[Path]:
        """Export all sessions to a JSON file.

        Args:
            directory: Target directory, the data exports directory if None

        Returns:
            Path to the written file, or None if there was nothing to export
        """
        sessions = self.repository.list_sessions()
        if not sessions:
            logger.info("No data to export")
            return None

        target_dir = Path(directory) if directory is not None else self.exports_dir
        target_dir.mkdir(parents=True, exist_ok=True)
        export_path = target_dir / export_filename()

        try:
            export_path.write_text(dumps_sessions(sessions), encoding='utf-8')
        except OSError as e:
            logger.error(f"Error writing export file: {e}")
            raise

        logger.info(f"Exported {len(sessions)} sessions to {export_path}")
        return export_path
