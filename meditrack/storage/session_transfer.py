"""Session export/import codec.

Export files are JSON objects of the form::

    {
      "exportVersion": "1.0",
      "exportTimestamp": "2024-03-01T08:00:00",
      "sessions": [
        {"sessionDateTime": "2024-02-29T07:15:00", "durationSeconds": 600, "notes": null}
      ]
    }

The same record layout is used by the JSON session store.
"""

import json
import logging
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, StrictInt, ValidationError, field_validator

from ..models.session import Session
from ..stats.engine import to_local_naive

logger = logging.getLogger(__name__)

EXPORT_VERSION = "1.0"


class SessionImportError(Exception):
    """Raised when an export file cannot be imported at all."""


class SessionRecord(BaseModel):
    """One serialized session as found in export and store files."""
    model_config = ConfigDict(populate_by_name=True)

    timestamp: datetime = Field(alias="sessionDateTime")
    duration_seconds: StrictInt = Field(alias="durationSeconds", ge=0)
    notes: Optional[str] = None

    @field_validator("timestamp", mode="before")
    @classmethod
    def _parse_iso_string(cls, value: Any) -> Any:
        # Digit strings are not epoch seconds here
        if isinstance(value, datetime):
            return value
        if not isinstance(value, str):
            raise ValueError("sessionDateTime must be an ISO-8601 string")
        text = value.strip()
        if text[-1:] in ("Z", "z"):
            text = text[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(text)
        except ValueError:
            raise ValueError(f"sessionDateTime is not ISO-8601: {value!r}") from None

    @field_validator("timestamp")
    @classmethod
    def _to_local_time(cls, value: datetime) -> datetime:
        # Stored timestamps are naive local time
        return to_local_naive(value)

    def to_session(self) -> Session:
        return Session(timestamp=self.timestamp,
                       duration_seconds=self.duration_seconds,
                       notes=self.notes)


def session_to_record(session: Session) -> Dict[str, Any]:
    """Serialize a session to its JSON record."""
    return {
        "sessionDateTime": session.timestamp.isoformat(),
        "durationSeconds": session.duration_seconds,
        "notes": session.notes,
    }


def record_to_session(record: Any) -> Session:
    """Parse a JSON record into a Session.

    Raises:
        ValueError: if the record is malformed
    """
    if not isinstance(record, dict):
        raise ValueError(f"Session record must be an object, got {type(record).__name__}")
    try:
        return SessionRecord.model_validate(record).to_session()
    except ValidationError as e:
        raise ValueError(f"Invalid session record: {e.errors()}") from e


def encode_sessions(sessions: Iterable[Session],
                    exported_at: Optional[datetime] = None) -> Dict[str, Any]:
    """Build the export container for sessions."""
    if exported_at is None:
        exported_at = datetime.now()
    return {
        "exportVersion": EXPORT_VERSION,
        "exportTimestamp": exported_at.isoformat(),
        "sessions": [session_to_record(s) for s in sessions],
    }


def dumps_sessions(sessions: Iterable[Session],
                   exported_at: Optional[datetime] = None) -> str:
    """Encode sessions as an indented JSON export document."""
    return json.dumps(encode_sessions(sessions, exported_at), indent=2, ensure_ascii=False)


def decode_sessions(data: Any) -> Tuple[List[Session], int]:
    """Decode an export container.

    Malformed records are skipped and counted rather than failing the import.

    Args:
        data: Parsed JSON export document

    Returns:
        Tuple of (decoded sessions in file order, number of malformed records)

    Raises:
        SessionImportError: if the container has no "sessions" list
    """
    if not isinstance(data, dict) or not isinstance(data.get("sessions"), list):
        raise SessionImportError('Invalid JSON format (missing "sessions" list)')

    version = data.get("exportVersion")
    if version is not None and version != EXPORT_VERSION:
        logger.warning(f"Importing export version {version!r}, expected {EXPORT_VERSION!r}")

    sessions: List[Session] = []
    failed = 0
    for record in data["sessions"]:
        try:
            sessions.append(record_to_session(record))
        except ValueError as e:
            failed += 1
            logger.warning(f"Skipping malformed session record {record!r}: {e}")

    logger.info(f"Decoded {len(sessions)} sessions ({failed} malformed)")
    return sessions, failed


def loads_sessions(text: str) -> Tuple[List[Session], int]:
    """Decode an export document from its JSON text."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise SessionImportError(f"Invalid JSON: {e}") from e
    return decode_sessions(data)


def export_filename(day: Optional[date] = None) -> str:
    """Default file name for an export made on day."""
    if day is None:
        day = date.today()
    return f"meditation_data_export_{day.isoformat()}.json"
