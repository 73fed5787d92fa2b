"""Unit tests for JsonSessionStore class."""

import pytest
import json
from pathlib import Path
from datetime import date, datetime, timezone
from unittest.mock import patch

from meditrack.models.session import Session
from meditrack.storage.json_store import JsonSessionStore, SessionStoreError


@pytest.mark.unit
class TestJsonSessionStore:
    """Test cases for JsonSessionStore class."""

    def test_initialization(self, temp_data_dir):
        """Test JsonSessionStore initialization."""
        store = JsonSessionStore(temp_data_dir)

        assert store.data_dir == Path(temp_data_dir)
        assert store.exports_dir == Path(temp_data_dir) / "exports"
        assert store.logs_dir == Path(temp_data_dir) / "logs"
        assert store.sessions_file == Path(temp_data_dir) / "sessions.json"

        # Check directories were created
        assert store.exports_dir.exists()
        assert store.logs_dir.exists()
        assert store.list_sessions() == []

    def test_insert_and_list_newest_first(self, temp_data_dir):
        store = JsonSessionStore(temp_data_dir)
        older = Session(datetime(2024, 1, 1, 8), 300)
        newer = Session(datetime(2024, 1, 2, 8), 600, "good one")

        store.insert_session(older)
        store.insert_session(newer)

        assert store.list_sessions() == [newer, older]

    def test_sessions_persist_across_instances(self, temp_data_dir):
        store = JsonSessionStore(temp_data_dir)
        session = Session(datetime(2024, 1, 1, 8, 30), 900, "notes")
        store.insert_session(session)

        reopened = JsonSessionStore(temp_data_dir)

        assert reopened.list_sessions() == [session]

    def test_file_layout(self, temp_data_dir):
        store = JsonSessionStore(temp_data_dir)
        store.insert_session(Session(datetime(2024, 1, 1, 8), 300))

        with open(store.sessions_file, 'r') as f:
            data = json.load(f)

        assert data == {"sessions": [
            {"sessionDateTime": "2024-01-01T08:00:00", "durationSeconds": 300, "notes": None}
        ]}

    def test_insert_same_timestamp_replaces(self, temp_data_dir):
        store = JsonSessionStore(temp_data_dir)
        timestamp = datetime(2024, 1, 1, 8)

        store.insert_session(Session(timestamp, 300))
        store.insert_session(Session(timestamp, 450, "edited"))

        assert store.list_sessions() == [Session(timestamp, 450, "edited")]

    def test_negative_duration_rejected(self, temp_data_dir):
        store = JsonSessionStore(temp_data_dir)

        with pytest.raises(ValueError):
            store.insert_session(Session(datetime(2024, 1, 1), -1))
        assert not store.sessions_file.exists()

    def test_session_exists(self, temp_data_dir):
        store = JsonSessionStore(temp_data_dir)
        store.insert_session(Session(datetime(2024, 1, 1, 8), 300))

        assert store.session_exists(datetime(2024, 1, 1, 8))
        assert not store.session_exists(datetime(2024, 1, 1, 8, 0, 1))

    def test_delete_session(self, temp_data_dir):
        store = JsonSessionStore(temp_data_dir)
        store.insert_session(Session(datetime(2024, 1, 1, 8), 300))

        assert store.delete_session(datetime(2024, 1, 1, 8)) is True
        assert store.delete_session(datetime(2024, 1, 1, 8)) is False
        assert JsonSessionStore(temp_data_dir).list_sessions() == []

    def test_update_session(self, temp_data_dir):
        store = JsonSessionStore(temp_data_dir)
        original = Session(datetime(2024, 1, 1, 8), 300)
        store.insert_session(original)

        moved = Session(datetime(2024, 1, 1, 9), 360, "fixed time")
        assert store.update_session(original.timestamp, moved) is True
        assert store.list_sessions() == [moved]

        assert store.update_session(datetime(2030, 1, 1), moved) is False

    def test_sessions_for_date(self, temp_data_dir):
        store = JsonSessionStore(temp_data_dir)
        morning = Session(datetime(2024, 1, 2, 0, 0), 300)
        evening = Session(datetime(2024, 1, 2, 23, 59, 59), 600)
        store.insert_session(Session(datetime(2024, 1, 1, 23, 59), 60))
        store.insert_session(morning)
        store.insert_session(evening)
        store.insert_session(Session(datetime(2024, 1, 3, 0, 0), 60))

        assert store.sessions_for_date(date(2024, 1, 2)) == [evening, morning]
        assert store.sessions_for_date(date(2024, 1, 10)) == []

    def test_sessions_in_range_includes_whole_end_day(self, temp_data_dir):
        store = JsonSessionStore(temp_data_dir)
        for day in range(1, 6):
            store.insert_session(Session(datetime(2024, 1, day, 22), 60 * day))

        result = store.sessions_in_range(date(2024, 1, 2), date(2024, 1, 4))

        assert [s.timestamp.day for s in result] == [4, 3, 2]

    def test_corrupt_file_raises(self, temp_data_dir):
        (Path(temp_data_dir) / "sessions.json").write_text("invalid json content")

        with pytest.raises(SessionStoreError):
            JsonSessionStore(temp_data_dir)

    def test_malformed_record_in_store_raises(self, temp_data_dir):
        (Path(temp_data_dir) / "sessions.json").write_text(
            json.dumps({"sessions": [{"sessionDateTime": "bad", "durationSeconds": 1}]}))

        with pytest.raises(SessionStoreError):
            JsonSessionStore(temp_data_dir)

    def test_error_handling_save(self, temp_data_dir):
        """Write failures propagate and roll back the in-memory sessions."""
        store = JsonSessionStore(temp_data_dir)
        kept = Session(datetime(2024, 1, 1), 60)
        store.insert_session(kept)

        with patch('builtins.open', side_effect=PermissionError("Access denied")):
            with pytest.raises(PermissionError):
                store.insert_session(Session(datetime(2024, 1, 2), 60))
            with pytest.raises(PermissionError):
                store.delete_session(kept.timestamp)

        assert store.list_sessions() == [kept]
        assert JsonSessionStore(temp_data_dir).list_sessions() == [kept]

    def test_aware_sessions_stored_as_local_time(self, temp_data_dir):
        store = JsonSessionStore(temp_data_dir)
        local = Session(datetime(2024, 1, 1, 8), 300)
        aware = datetime(2024, 1, 2, 8, tzinfo=timezone.utc)
        store.insert_session(local)

        store.insert_session(Session(aware, 600))

        stored = store.list_sessions()
        assert [s.timestamp.tzinfo for s in stored] == [None, None]
        assert stored[0].timestamp == aware.astimezone().replace(tzinfo=None)
        assert store.session_exists(aware)
        assert store.delete_session(aware) is True
        assert store.list_sessions() == [local]

    def test_mixed_offsets_in_store_file_load(self, temp_data_dir):
        (Path(temp_data_dir) / "sessions.json").write_text(json.dumps({"sessions": [
            {"sessionDateTime": "2024-01-01T08:00:00", "durationSeconds": 300},
            {"sessionDateTime": "2024-01-02T08:00:00Z", "durationSeconds": 600},
        ]}))

        sessions = JsonSessionStore(temp_data_dir).list_sessions()

        assert [s.duration_seconds for s in sessions] == [600, 300]
