"""Conftest file for pytest"""

import os

# Configure the app before it is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["TIMER_TICKER_ENABLED"] = "false"
os.environ["RECORDER_BACKGROUND"] = "false"

from datetime import datetime, timedelta, UTC
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from focusflow.db.database import get_db
from focusflow.main import app
from focusflow.core.auth import get_password_hash, create_access_token
from focusflow.core.recorder import DatabaseSessionRecorder, DatabaseSettingsProvider
from focusflow.core.registry import TimerRegistry, get_timer_registry
from focusflow.db.models import Base, User, UserSettings

# ---- Database Connection Setup ----
# One in-memory database shared by every session of a test
engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


# ---- User Creation Functions ----
def create_test_user(db_session, username="testuser", email="testuser@example.com"):
    """Create a test user with default settings"""
    hashed_password = get_password_hash("password123")
    user = User(username=username, email=email, password_hash=hashed_password)
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)

    # Create default settings for the user
    settings = UserSettings(
        user_id=user.id,
        pomodoro_duration=1500,
        short_break_duration=300,
        long_break_duration=900,
        pomodoros_until_long_break=4,
        theme="light",
        notifications=True,
    )
    db_session.add(settings)
    db_session.commit()

    return user


# ---- Token Generation Functions ----
def generate_auth_token(user):
    """Generate an authentication token for a user"""
    return create_access_token(data={"sub": user.username})


# ---- Pytest Fixtures ----
@pytest.fixture(scope="function")
def db():
    """Create a fresh schema and a database session for each test"""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def test_user(db):
    """Create a test user with default settings"""
    return create_test_user(db)


@pytest.fixture
def other_user(db):
    """A second account whose data the test user must not see"""
    return create_test_user(db, username="otheruser", email="other@example.com")


@pytest.fixture
def timer_registry(db):
    """Timer registry writing sessions inline to the test database"""
    return TimerRegistry(
        DatabaseSettingsProvider(TestingSessionLocal),
        lambda user_id: DatabaseSessionRecorder(TestingSessionLocal, user_id),
    )


@pytest.fixture
def client(db, timer_registry):
    """Create a test client for the app"""

    # Create a new session for the test client
    test_db = TestingSessionLocal()

    # Override the get_db dependency to use the test database
    def override_get_db():
        try:
            yield test_db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_timer_registry] = lambda: timer_registry
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
    test_db.close()


@pytest.fixture
def authorized_client(client, test_user):
    """Create an authorized client for the test user"""
    # Create a token for the test user
    access_token = generate_auth_token(test_user)
    client.headers = {
        **client.headers,
        "Authorization": f"Bearer {access_token}",
    }
    return client


# ---- Timer Doubles ----
class FakeClock:
    """Clock that only moves when told to"""

    def __init__(self, start=None):
        self.now = start or datetime(2024, 1, 1, 9, 0, tzinfo=UTC)

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += timedelta(seconds=seconds)


class FakeRecorder:
    """Session recorder that keeps every call in memory"""

    def __init__(self):
        self.calls = []
        self._next_id = 1

    def start_session(self, task_id, started_at, mode, planned_duration_seconds):
        session_id = self._next_id
        self._next_id += 1
        self.calls.append(
            ("start", session_id, task_id, started_at, mode, planned_duration_seconds)
        )
        return session_id

    def stop_session(self, session_id, ended_at, duration_seconds, *, is_break, skipped):
        self.calls.append(
            ("stop", session_id, ended_at, duration_seconds, is_break, skipped)
        )

    @property
    def operations(self):
        return [call[0] for call in self.calls]


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def fake_recorder():
    return FakeRecorder()
