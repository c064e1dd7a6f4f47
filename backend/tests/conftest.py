"""
Shared fixtures: an in-memory SQLite database per test and an API client
whose AI dependencies are replaced with fakes.
"""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from habit_hub.db.base import Base
from habit_hub.models import habit  # noqa: F401  registers the tables
from habit_hub.services.habit_store import HabitStore


@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def store(db_session):
    return HabitStore(db_session, "test-user")


@pytest.fixture
def make_habit(store):
    """Create a habit with sensible defaults and return the ORM row"""
    def _make(**overrides):
        fields = {
            "name": "Drink water",
            "description": "",
            "type": "number",
            "frequency": "daily",
            "goal": "8 glasses",
            "icon": "Target",
        }
        fields.update(overrides)
        return store.require_habit(store.create_habit(fields))
    return _make


class FakeResolver:
    """Returns a queued intent and remembers what it was asked"""

    def __init__(self, intent=None):
        self.intent = intent
        self.calls = []

    async def resolve_intent(self, instruction, context):
        self.calls.append((instruction, context))
        return self.intent


class FakeCoach:
    def __init__(self):
        self.weekly_calls = []
        self.habit_calls = []

    async def weekly_feedback(self, habits, reports, current_date, time_of_day):
        self.weekly_calls.append((habits, reports, current_date, time_of_day))
        return "- Keep going!"

    async def habit_feedback(self, habit, last_completion_date=None, user_preferences=None):
        from habit_hub.services.habit_feedback import HabitFeedback
        self.habit_calls.append((habit, last_completion_date, user_preferences))
        return HabitFeedback(feedback=f"Nice work on {habit.name}", should_remind=not habit.completed)


@pytest.fixture
def fake_resolver():
    return FakeResolver()


@pytest.fixture
def fake_coach():
    return FakeCoach()


@pytest.fixture
def client(db_session, fake_resolver, fake_coach):
    from habit_hub.core.deps import get_habit_coach, get_intent_resolver
    from habit_hub.db.session import get_db
    from habit_hub.main import app

    def _get_db():
        yield db_session

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_intent_resolver] = lambda: fake_resolver
    app.dependency_overrides[get_habit_coach] = lambda: fake_coach
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
