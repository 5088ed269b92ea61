"""
Pytest configuration and shared fixtures for ReelShelf tests.
"""

import os
import tempfile

# Settings are read at import time, so the test environment must be in place
# before the application is imported.
_TEST_DIR = tempfile.mkdtemp(prefix="reelshelf-tests-")
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TEST_DIR, 'startup.db')}"
os.environ["REDIS_URL"] = ""
os.environ["SECRET_KEY"] = "test_secret_key_for_testing_only"
os.environ["JWT_SECRET_KEY"] = "test_jwt_secret_key_for_testing_only"
os.environ["UPLOAD_DIR"] = os.path.join(_TEST_DIR, "uploads")
os.environ["SENTRY_DSN"] = ""
os.environ["FRONTEND_URL"] = "http://frontend.test"
os.environ["API_BASE_URL"] = "http://api.test"

import pytest
from typing import Dict, Generator
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient
from unittest.mock import MagicMock

from reelshelf.main import app
from reelshelf.database import Base, get_db
from reelshelf.models.user import User
from reelshelf.models.media import Media
from reelshelf.models.media_list import MediaList, ListItem
from reelshelf.platforms.igdb.igdb_api import clear_token_cache
from reelshelf.services.auth_service import AuthService
from reelshelf.services.logging_service import app_metrics
from reelshelf.utils.security import hash_password


# Database setup
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"


@pytest.fixture(scope="function")
def test_db() -> Generator[Session, None, None]:
    """
    Create a fresh in-memory SQLite database for each test.
    """
    engine = create_engine(
        SQLALCHEMY_TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = TestingSessionLocal()

    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture(scope="function")
def client(test_db: Session) -> Generator[TestClient, None, None]:
    """
    Create a test client with overridden database dependency.
    """
    def override_get_db():
        try:
            yield test_db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


def make_user(db: Session, username: str, email: str, password: str = "testpassword123") -> User:
    """Insert an active user."""
    user = User(
        email=email,
        username=username,
        hashed_password=hash_password(password),
        is_active=True
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def bearer(db: Session, user: User) -> Dict[str, str]:
    """Open a session for a user and return its Authorization header."""
    token = AuthService.create_user_session(db, user)
    return {"Authorization": f"Bearer {token}"}


# User fixtures
@pytest.fixture
def test_user(test_db: Session) -> User:
    """
    Create a test user.
    """
    return make_user(test_db, "testuser", "test@example.com")


@pytest.fixture
def test_user2(test_db: Session) -> User:
    """
    Create a second test user for multi-user tests.
    """
    return make_user(test_db, "otheruser", "other@example.com", password="testpassword456")


@pytest.fixture
def auth_headers(test_db: Session, test_user: User) -> Dict[str, str]:
    """
    Create authentication headers backed by a live session.
    """
    return bearer(test_db, test_user)


@pytest.fixture
def auth_headers2(test_db: Session, test_user2: User) -> Dict[str, str]:
    """
    Create authentication headers for second user.
    """
    return bearer(test_db, test_user2)


# Content fixtures
@pytest.fixture
def movie(test_db: Session) -> Media:
    """A catalogued movie."""
    media = Media(media_type="movie", external_id="tt0133093", title="The Matrix", release_year=1999)
    test_db.add(media)
    test_db.commit()
    test_db.refresh(media)
    return media


@pytest.fixture
def three_item_list(test_db: Session, test_user: User) -> MediaList:
    """A list owned by test_user holding three titles at positions 1..3."""
    media_list = MediaList(user_id=test_user.id, title="Favorites of the decade", is_public=True)
    test_db.add(media_list)
    test_db.flush()

    for position, (external_id, title) in enumerate(
        [("tt0000001", "First"), ("tt0000002", "Second"), ("tt0000003", "Third")],
        start=1
    ):
        media = Media(media_type="movie", external_id=external_id, title=title)
        test_db.add(media)
        test_db.flush()
        test_db.add(ListItem(list_id=media_list.id, media_id=media.id, position=position))

    test_db.commit()
    test_db.refresh(media_list)
    return media_list


# Mock services
@pytest.fixture
def mock_response():
    """
    Build fake requests responses for third-party client tests.
    """
    def _make(json_data=None, status_code: int = 200, text: str = "", headers=None):
        response = MagicMock()
        response.status_code = status_code
        response.ok = 200 <= status_code < 300
        response.reason = "OK" if response.ok else "Error"
        response.json.return_value = json_data
        response.text = text
        response.headers = headers or {}
        return response

    return _make


@pytest.fixture(autouse=True)
def reset_process_state():
    """
    Reset metrics and cached upstream tokens between tests.
    """
    app_metrics.reset()
    clear_token_cache()
    yield
    app_metrics.reset()
    clear_token_cache()
