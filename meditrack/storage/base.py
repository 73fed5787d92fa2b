"""Abstract base class for session storage."""

from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import List

from ..models.session import Session


class SessionRepository(ABC):
    """Storage collaborator that owns the recorded sessions."""

    @abstractmethod
    def list_sessions(self) -> List[Session]:
        """Return every stored session, newest first."""
        pass

    @abstractmethod
    def insert_session(self, session: Session) -> None:
        """Store a session, replacing any session with the same timestamp."""
        pass

    @abstractmethod
    def session_exists(self, timestamp: datetime) -> bool:
        """Check whether a session with exactly this timestamp is stored."""
        pass

    @abstractmethod
    def delete_session(self, timestamp: datetime) -> bool:
        """Delete the session with this timestamp.

        Returns:
            True if a session was deleted
        """
        pass

    @abstractmethod
    def update_session(self, timestamp: datetime, session: Session) -> bool:
        """Replace the session stored under timestamp with session.

        Returns:
            True if a session was updated
        """
        pass

    @abstractmethod
    def sessions_for_date(self, day: date) -> List[Session]:
        """Sessions on one local calendar day, newest first."""
        pass

    @abstractmethod
    def sessions_in_range(self, start: date, end: date) -> List[Session]:
        """Sessions from the start of start to the end of end, newest first."""
        pass
