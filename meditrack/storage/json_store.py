"""JSON file backed session storage."""

import os
import json
import logging
import threading
from pathlib import Path
from dataclasses import replace
from datetime import date, datetime
from typing import Dict, List

from ..models.session import Session
from ..stats.engine import activity_day, to_local_naive
from .base import SessionRepository
from .session_transfer import record_to_session, session_to_record


logger = logging.getLogger(__name__)

SESSIONS_FILENAME = "sessions.json"


class SessionStoreError(Exception):
    """Raised when the session file cannot be read."""


class JsonSessionStore(SessionRepository):
    """Stores meditation sessions in a single JSON file under the data directory."""

    def __init__(self, data_dir: str = "./data"):
        """Initialize the store and load existing sessions.

        Args:
            data_dir: Base directory for storing all data
        """
        self.data_dir = Path(data_dir)
        self.exports_dir = self.data_dir / "exports"
        self.logs_dir = self.data_dir / "logs"
        self.sessions_file = self.data_dir / SESSIONS_FILENAME

        self._lock = threading.RLock()
        self._ensure_directories()
        self._sessions: Dict[datetime, Session] = self._load()

        logger.info(f"JsonSessionStore initialized with data_dir: {self.data_dir} "
                    f"({len(self._sessions)} sessions)")

    def _ensure_directories(self) -> None:
        """Ensure all required directories exist."""
        for directory in [self.data_dir, self.exports_dir, self.logs_dir]:
            directory.mkdir(parents=True, exist_ok=True)
            logger.debug(f"Ensured directory exists: {directory}")

    def _load(self) -> Dict[datetime, Session]:
        """Load sessions from the JSON file, empty if it does not exist yet."""
        if not self.sessions_file.exists():
            logger.info(f"No session file yet: {self.sessions_file}")
            return {}

        try:
            with open(self.sessions_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
            records = data["sessions"]
            sessions = [record_to_session(record) for record in records]
        except (OSError, json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            logger.error(f"Error loading session file {self.sessions_file}: {e}")
            raise SessionStoreError(f"Cannot read session file {self.sessions_file}: {e}") from e

        return {s.timestamp: s for s in sessions}

    def _save(self) -> None:
        """Write all sessions to disk, replacing the file atomically."""
        ordered = sorted(self._sessions.values(), key=lambda s: s.timestamp)
        payload = {"sessions": [session_to_record(s) for s in ordered]}
        tmp_file = self.sessions_file.with_suffix(".json.tmp")

        try:
            with open(tmp_file, 'w', encoding='utf-8') as f:
                json.dump(payload, f, indent=2, ensure_ascii=False)
            os.replace(tmp_file, self.sessions_file)
            logger.debug(f"Saved {len(ordered)} sessions to {self.sessions_file}")

        except Exception as e:
            logger.error(f"Error saving session file: {e}")
            raise

    def _save_or_rollback(self, previous: Dict[datetime, Session]) -> None:
        """Persist the current sessions, restoring previous if the write fails."""
        try:
            self._save()
        except Exception:
            self._sessions = previous
            raise

    @staticmethod
    def _localized(session: Session) -> Session:
        if session.timestamp.tzinfo is None:
            return session
        return replace(session, timestamp=to_local_naive(session.timestamp))

    @staticmethod
    def _newest_first(sessions: List[Session]) -> List[Session]:
        return sorted(sessions, key=lambda s: s.timestamp, reverse=True)

    def list_sessions(self) -> List[Session]:
        with self._lock:
            return self._newest_first(list(self._sessions.values()))

    def insert_session(self, session: Session) -> None:
        if session.duration_seconds < 0:
            raise ValueError(f"Session duration must be >= 0, got {session.duration_seconds}")
        session = self._localized(session)

        with self._lock:
            previous = dict(self._sessions)
            replaced = session.timestamp in self._sessions
            self._sessions[session.timestamp] = session
            self._save_or_rollback(previous)

        action = "Replaced" if replaced else "Inserted"
        logger.info(f"{action} session at {session.timestamp.isoformat()} ({session.duration_seconds}s)")

    def session_exists(self, timestamp: datetime) -> bool:
        timestamp = to_local_naive(timestamp)
        with self._lock:
            return timestamp in self._sessions

    def delete_session(self, timestamp: datetime) -> bool:
        timestamp = to_local_naive(timestamp)
        with self._lock:
            if timestamp not in self._sessions:
                logger.warning(f"No session to delete at {timestamp.isoformat()}")
                return False
            previous = dict(self._sessions)
            del self._sessions[timestamp]
            self._save_or_rollback(previous)

        logger.info(f"Deleted session at {timestamp.isoformat()}")
        return True

    def update_session(self, timestamp: datetime, session: Session) -> bool:
        if session.duration_seconds < 0:
            raise ValueError(f"Session duration must be >= 0, got {session.duration_seconds}")
        timestamp = to_local_naive(timestamp)
        session = self._localized(session)

        with self._lock:
            if timestamp not in self._sessions:
                return False
            previous = dict(self._sessions)
            del self._sessions[timestamp]
            self._sessions[session.timestamp] = session
            self._save_or_rollback(previous)

        logger.info(f"Updated session at {timestamp.isoformat()}")
        return True

    def sessions_for_date(self, day: date) -> List[Session]:
        return self.sessions_in_range(day, day)

    def sessions_in_range(self, start: date, end: date) -> List[Session]:
        with self._lock:
            matching = [s for s in self._sessions.values()
                        if start <= activity_day(s.timestamp) <= end]
        return self._newest_first(matching)
