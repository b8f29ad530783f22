"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import json
import sys
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from src.core.models import (
    CompletedProgress,
    ContentSource,
    Difficulty,
    LearningItem,
    ProgressRecord,
    ProgressStatus,
    UserProfile,
    Visibility,
)
from src.db.database import init_db
from src.db.seed import seed_data
from src.recommendation.stores import InMemoryCatalog, InMemoryProgress, InMemoryRecommendationLog

DEMO_FIXTURE = PROJECT_ROOT / "data" / "fixtures" / "demo.json"


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (in-memory SQLite)")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands and API endpoints")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        # Mark based on test file location
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return PROJECT_ROOT


# ========================================
# Domain fixtures
# ========================================


@pytest.fixture
def make_item():
    """Factory for learning items with sensible defaults."""

    def _make(item_id: str, **kwargs) -> LearningItem:
        kwargs.setdefault("title", item_id.replace("-", " ").title())
        return LearningItem(item_id=item_id, **kwargs)

    return _make


@pytest.fixture
def completed():
    """Factory for completed progress joined with its item."""

    def _completed(user_id: str, item: LearningItem | None, score: float | None = None,
                   item_id: str | None = None) -> CompletedProgress:
        record = ProgressRecord(
            user_id=user_id,
            item_id=item_id or item.item_id,
            status=ProgressStatus.COMPLETED,
            score=score,
        )
        return CompletedProgress(record=record, item=item)

    return _completed


@pytest.fixture
def learner():
    """A learner interested in python and web topics."""
    return UserProfile(user_id="u1", interests=("python, web",))


@pytest.fixture
def catalog_items(make_item):
    """A small catalog covering every source and visibility."""
    return [
        make_item("py-basics", tags=("python",), visits=100, rating=4.5),
        make_item("py-oop", tags=("python",), visits=50, rating=4.0),
        make_item(
            "flask-intro",
            tags=("python", "web"),
            difficulty=Difficulty.INTERMEDIATE,
            visits=25,
            rating=4.0,
            prerequisites=("python",),
        ),
        make_item(
            "async-deep-dive",
            tags=("python", "async"),
            difficulty=Difficulty.ADVANCED,
            visits=40,
            rating=5.0,
            prerequisites=("python", "async"),
        ),
        make_item("sql-joins", tags=("sql",), visits=60, rating=4.4),
        make_item(
            "gen-http",
            tags=("web", "http"),
            difficulty=Difficulty.INTERMEDIATE,
            visits=10,
            rating=4.0,
            prerequisites=("python",),
            source=ContentSource.GENERATED,
            visibility=Visibility.PRIVATE,
            personalized_for=frozenset({"u1"}),
        ),
        make_item(
            "my-web-notes",
            tags=("web",),
            visits=5,
            source=ContentSource.USER,
            visibility=Visibility.PRIVATE,
            owner_id="u1",
        ),
        make_item(
            "css-grid",
            tags=("web", "css"),
            visits=80,
            rating=3.5,
            source=ContentSource.USER,
            owner_id="u2",
        ),
    ]


@pytest.fixture
def memory_stores(catalog_items):
    """In-memory catalog, progress and log; u1 finished both python basics items."""
    catalog = InMemoryCatalog(catalog_items)
    progress = InMemoryProgress(
        catalog,
        [
            ProgressRecord("u1", "py-basics", ProgressStatus.COMPLETED, 80),
            ProgressRecord("u1", "py-oop", ProgressStatus.COMPLETED, 100),
            ProgressRecord("u1", "css-grid", ProgressStatus.IN_PROGRESS),
        ],
    )
    return catalog, progress, InMemoryRecommendationLog()


# ========================================
# Database fixtures
# ========================================


@pytest.fixture
def sqlite_engine():
    """Fresh in-memory SQLite database with all tables created."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(sqlite_engine):
    return sessionmaker(bind=sqlite_engine, autocommit=False, autoflush=False)


@pytest.fixture
def demo_data():
    return json.loads(DEMO_FIXTURE.read_text(encoding="utf-8"))


@pytest.fixture
def seeded_session_factory(session_factory, demo_data):
    """Session factory over a database loaded with the demo fixture."""
    seed_data(demo_data, session_factory)
    return session_factory
