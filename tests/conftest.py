"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import sys
from datetime import UTC, datetime
from itertools import count
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from studydesk.core.models import (  # noqa: E402
    Deck,
    Flashcard,
    SyllabusTopic,
    TopicStatus,
)
from studydesk.store.dashboard import DashboardStore  # noqa: E402
from studydesk.store.persistence import MemoryStorage, SnapshotRepository  # noqa: E402

FIXED_NOW = datetime(2025, 1, 1, 9, 30, tzinfo=UTC)


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "cli: CLI command tests")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        if "test_cli" in str(item.fspath):
            item.add_marker(pytest.mark.cli)


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def fixed_now():
    """A fixed UTC timestamp: 2025-01-01 09:30."""
    return FIXED_NOW


@pytest.fixture
def id_factory():
    """Deterministic ids: id-1, id-2, ..."""
    counter = count(1)
    return lambda: f"id-{next(counter)}"


@pytest.fixture
def storage():
    """Empty in-memory key-value storage."""
    return MemoryStorage()


@pytest.fixture
def repository(storage):
    return SnapshotRepository(storage, "upsc-dashboard-v1")


@pytest.fixture
def store(repository, id_factory, fixed_now):
    """Store with default state, fixed clock and deterministic ids."""
    return DashboardStore(repository, clock=lambda: fixed_now, id_factory=id_factory)


@pytest.fixture
def small_tree():
    """
    Provide a two-paper tree.

    p1
    ├── s1 (leaf)
    └── s2
        ├── s2a (leaf)
        └── s2b (leaf)
    p2
    └── t1 (leaf)
    """
    return [
        SyllabusTopic(
            id="p1",
            title="GS Paper I: History",
            subtopics=(
                SyllabusTopic(id="s1", title="Art & Culture"),
                SyllabusTopic(
                    id="s2",
                    title="Modern History",
                    subtopics=(
                        SyllabusTopic(id="s2a", title="1857 Revolt"),
                        SyllabusTopic(id="s2b", title="Freedom Struggle"),
                    ),
                ),
            ),
        ),
        SyllabusTopic(
            id="p2",
            title="GS Paper II: Polity",
            subtopics=(SyllabusTopic(id="t1", title="Constitution", status=TopicStatus.MASTERED),),
        ),
    ]


@pytest.fixture
def sample_deck():
    """Provide a deck with three new cards."""
    return Deck(
        id="d1",
        title="Polity",
        cards=tuple(
            Flashcard(id=f"c{i}", deck_id="d1", front=f"Q{i}", back=f"A{i}") for i in range(1, 4)
        ),
    )
