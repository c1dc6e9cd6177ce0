import sys
from datetime import datetime
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from habitblocks.config import TestingConfig
from habitblocks.domains.habits.services.tracker_service import HabitTracker
from habitblocks.platform.storage import InMemoryDocumentStore


# ==================== Pytest Markers ====================
def pytest_configure(config):
    """Register custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (no external dependencies)")
    config.addinivalue_line("markers", "integration: Integration tests (document store, filesystem)")
    config.addinivalue_line("markers", "slow: Slow running tests")


class FailingDocumentStore(InMemoryDocumentStore):
    """In-memory store whose writes to selected keys fail."""

    def __init__(self, documents=None, fail_keys=()):
        super().__init__(documents)
        self.fail_keys = set(fail_keys)
        self.save_attempts = []

    def save_document(self, key, value):
        self.save_attempts.append(key)
        if key in self.fail_keys:
            return False
        return super().save_document(key, value)


@pytest.fixture
def now():
    """A fixed local wall-clock time (naive, so it is already local)."""
    return datetime(2024, 3, 15, 9, 30)


@pytest.fixture
def store():
    return InMemoryDocumentStore()


@pytest.fixture
def failing_store_factory():
    def _make(documents=None, fail_keys=()):
        return FailingDocumentStore(documents, fail_keys)

    return _make


@pytest.fixture
def tracker(store):
    return HabitTracker(store, config=TestingConfig)


@pytest.fixture
def multi_config():
    """Config document with two enabled habits."""
    return {
        "mode": "multiple",
        "currentHabit": "Gym",
        "habits": {
            "Gym": {"name": "Gym", "created": "2024-01-01T00:00:00", "enabled": True},
            "Read": {"name": "Read", "created": "2024-01-01T00:00:00", "enabled": True},
        },
        "version": "2.0",
    }
