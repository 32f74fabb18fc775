"""
Pytest configuration and shared fixtures for the test suite.
Ensures proper Python path and provides common fixtures for unit and integration tests.
"""
import os
import sys
import tempfile
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Keep the app's own engine and log files away from the working tree.
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="learnpath-logs-"))

# Add project root to Python path for imports
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))


# ----- In-memory DB (for tests that need DB without touching real DB) -----
@pytest.fixture
def in_memory_engine():
    """In-memory SQLite engine; StaticPool keeps one connection so every session sees the same data."""
    return create_engine(
        "sqlite://",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )


@pytest.fixture
def db_session(in_memory_engine):
    """Create an in-memory database session. Uses learnpath.config.Base for schema."""
    import learnpath.models  # noqa: F401
    from learnpath.config import Base
    Base.metadata.create_all(in_memory_engine)
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=in_memory_engine)
    session = SessionLocal()
    yield session
    session.close()


def _make_user(db, email, permissions=None):
    from learnpath.models.models import User
    user = User(email=email, hashed_password="not-a-real-hash", permissions=permissions or [])
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def learner(db_session):
    return _make_user(db_session, "learner@example.com")


@pytest.fixture
def other_learner(db_session):
    return _make_user(db_session, "other@example.com")


@pytest.fixture
def build_course(db_session):
    """
    Build a course through the authoring service.
    build_course((2, 1)) -> two modules, the first with two lessons, the second with one.
    """
    from learnpath.services.authoring_service import AuthoringService

    def _build(lessons_per_module=(2,), published=True, is_free=True, title="Intro to Testing"):
        svc = AuthoringService(db_session)
        course = svc.create_course(title, is_published=published, is_free=is_free)
        for i, count in enumerate(lessons_per_module):
            module = svc.create_module(course.id, f"Module {i + 1}", is_published=published)
            for j in range(count):
                svc.create_lesson(module.id, f"Lesson {i + 1}.{j + 1}", content="...", is_published=published)
        db_session.refresh(course)
        return course

    return _build


@pytest.fixture
def make_quiz(db_session):
    """Attach a quiz whose questions all have the correct answer "a"."""
    from learnpath.services.authoring_service import AuthoringService

    def _make(kind, unit_id, points=(1,), passing_score=None):
        svc = AuthoringService(db_session)
        quiz = svc.attach_quiz(kind, unit_id, "Checkpoint", passing_score=passing_score)
        for i, p in enumerate(points):
            svc.add_question(quiz.id, f"Question {i + 1}", ["a"], options=["a", "b"], points=p)
        db_session.refresh(quiz)
        return quiz

    return _make


@pytest.fixture
def answer_sheet():
    """answer_sheet(quiz, 2) answers the first two questions correctly and the rest wrongly."""

    def _sheet(quiz, correct):
        return {q.id: ("a" if i < correct else "b") for i, q in enumerate(quiz.questions)}

    return _sheet
