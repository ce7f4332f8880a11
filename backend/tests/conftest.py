"""Test configuration and fixtures for Mediator backend tests."""

import os
import sys
import pathlib
import pytest
from unittest.mock import patch


from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel, create_engine
from sqlmodel.pool import StaticPool

BACKEND_DIR = pathlib.Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

# Set test environment before importing backend modules
os.environ["MEDIATOR_SECRET_KEY"] = "test_secret_key"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["TESTING_MODE"] = "True"
os.environ["OMDB_API_KEY"] = "test_omdb_key"

PASSWORD = "correct horse battery"


@pytest.fixture(autouse=True, scope="session")
def anyio_backend():  # pragma: no cover
    return "asyncio"


@pytest.fixture(autouse=True)
def test_engine():
    """Create a test database engine."""
    from models.common import enable_sqlite_foreign_keys

    engine = enable_sqlite_foreign_keys(
        create_engine(
            "sqlite:///:memory:",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    )
    # Ensure models are imported so tables are registered in SQLModel.metadata
    import models  # noqa: F401

    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def test_session(test_engine):
    """Create a test database session."""
    with Session(test_engine) as session:
        yield session


@pytest.fixture
def override_get_session(test_engine):
    """One session per request, like the real dependency."""

    def _override_get_session():
        with Session(test_engine, expire_on_commit=False) as session:
            yield session

    return _override_get_session


@pytest.fixture
def test_app(override_get_session):
    """Create a test FastAPI application."""
    # Patch update_database to skip migrations in tests
    with patch("app.update_database"):
        from app import create_app

        app = create_app()
        from models.common import get_session

        app.dependency_overrides[get_session] = override_get_session
        yield app
        app.dependency_overrides.clear()


@pytest.fixture
def client(test_app):
    """Create a test client."""
    with TestClient(test_app) as client:
        yield client


@pytest.fixture(scope="session")
def password_hash():
    from services.security import get_password_hash

    return get_password_hash(PASSWORD)


@pytest.fixture
def make_user(test_session: Session, password_hash):
    from models.auth import User

    def _make_user(username: str) -> User:
        user = User(
            username=username,
            email=f"{username}@example.com",
            password_hash=password_hash,
        )
        test_session.add(user)
        test_session.commit()
        test_session.refresh(user)
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
def auth_headers():
    """Build a bearer Authorization header for a user"""
    from services.security import create_access_token

    def _auth_headers(user) -> dict:
        return {"Authorization": f"Bearer {create_access_token(user.id)}"}

    return _auth_headers


@pytest.fixture
def login_as(test_app):
    """Switch the current user without going through tokens"""
    from routes.deps import get_current_user

    def _login_as(user):
        test_app.dependency_overrides[get_current_user] = lambda: user

    yield _login_as
    test_app.dependency_overrides.pop(get_current_user, None)


@pytest.fixture
def password():
    return PASSWORD
