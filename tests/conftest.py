"""Pytest configuration and fixtures for Meditrack tests."""

import pytest
import tempfile
import logging
from datetime import date, datetime, timedelta
from pathlib import Path

from pubsub import pub

from meditrack.models.session import Session


# Configure logging for tests
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Fixed reference day so streak tests do not depend on the wall clock
TODAY = date(2024, 6, 15)


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast isolated tests")
    config.addinivalue_line("markers", "integration: services wired together")


@pytest.fixture
def temp_data_dir():
    """Create temporary directory for test data."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield temp_dir


@pytest.fixture(autouse=True)
def reset_pubsub():
    """Drop pub/sub listeners left behind by a test."""
    yield
    pub.unsubAll()


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def make_session():
    """Factory for sessions relative to the reference day."""
    def _make(days_ago: int = 0, duration_seconds: int = 600, hour: int = 7,
              minute: int = 0, notes=None) -> Session:
        day = TODAY - timedelta(days=days_ago)
        timestamp = datetime(day.year, day.month, day.day, hour, minute)
        return Session(timestamp=timestamp, duration_seconds=duration_seconds, notes=notes)

    return _make


@pytest.fixture
def config_file(temp_data_dir):
    """Write a configuration file whose data directory lives in the temp dir."""
    path = Path(temp_data_dir) / "meditrack.yaml"
    path.write_text(
        "storage:\n"
        "  data_directory: data\n"
        "timer:\n"
        "  min_session_seconds: 10\n"
        "statistics:\n"
        "  default_period: daily\n"
        "logging:\n"
        "  level: DEBUG\n"
        "  file_path: data/logs/meditrack.log\n"
        "  console_output: false\n",
        encoding="utf-8",
    )
    return str(path)
