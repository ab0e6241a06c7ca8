"""
Pytest configuration and fixtures for nitpick tests.

Tests run against an in-memory SQLite database shared by one connection,
so the service, the query builder, and the API all see the same rows.
"""

import os
import sys
from datetime import datetime

import pytest

# Add the project root to the path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

# Settings are cached on first use; configure before importing the app
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("DEMO_MODE", "false")

from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from nitpick.database import Base, enable_sqlite_savepoints  # noqa: E402
from nitpick import models  # noqa: E402,F401
from nitpick.models.problem import Problem  # noqa: E402
from nitpick.models.user import User  # noqa: E402
from nitpick.services.submission_service import SubmissionService  # noqa: E402


@pytest.fixture
def engine():
    """Fresh in-memory database with all tables."""
    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_savepoints(test_engine)
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    test_engine.dispose()


@pytest.fixture
def db(engine):
    """Database session bound to the test engine."""
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    yield session
    session.close()


@pytest.fixture
def make_user(db):
    """Factory creating persisted users."""
    def _make_user(username: str) -> User:
        user = User(username=username, email=f"{username}@example.com")
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _make_user


@pytest.fixture
def alice(make_user):
    return make_user("alice")


@pytest.fixture
def bob(make_user):
    return make_user("bob")


@pytest.fixture
def carol(make_user):
    return make_user("carol")


@pytest.fixture
def leap():
    return Problem("ruby", "leap")


@pytest.fixture
def service(db):
    return SubmissionService(db)


@pytest.fixture
def backdate(db):
    """Move a submission's creation time and persist it."""
    def _backdate(submission, created_at: datetime):
        submission.created_at = created_at
        db.commit()
        db.refresh(submission)
        return submission
    return _backdate
