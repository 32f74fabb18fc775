"""
Integration test fixtures. Overrides get_db for API tests with in-memory DB.
"""
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

PASSWORD = "correct-horse-battery"


@pytest.fixture
def override_get_db():
    """Create in-memory engine and session factory for API tests."""
    import learnpath.models  # noqa: F401
    from learnpath.config import Base
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def _get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    return _get_db


@pytest.fixture
def api_client(override_get_db):
    """FastAPI TestClient with in-memory DB override."""
    from fastapi.testclient import TestClient
    from learnpath.api import app
    from learnpath.config import get_db
    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def seed_user(override_get_db):
    """seed_user("a@example.com", ["admin"]) -> user id, with password PASSWORD."""
    from learnpath.utils.auth import create_user

    def _seed(email, permissions=None):
        db_gen = override_get_db()
        db = next(db_gen)
        try:
            return create_user(email, PASSWORD, db, permissions=permissions).id
        finally:
            db.close()

    return _seed


@pytest.fixture
def login(api_client):
    """Log the shared client in as `email`; the auth cookie replaces any previous one."""

    def _login(email):
        response = api_client.post("/auth/login", json={"email": email, "password": PASSWORD})
        assert response.status_code == 200, response.text
        return api_client

    return _login
