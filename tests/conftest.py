"""
Shared fixtures: in-memory SQLite database, FastAPI app with ``get_db``
overridden, and small factories for users and quizzes.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from main import create_app
from tutorcenter.core.database import Base, get_db
from tutorcenter.core.security import create_access_token
from tutorcenter.models.quiz_db.quiz_crud import create_quiz
from tutorcenter.models.user_db.user_db_crud import create_user
from tutorcenter.schemas.quiz.quiz_base import QuizCreate
from tutorcenter.schemas.users.user_base import UserCreate
from tutorcenter.services.quiz_attempt import AttemptRegistry


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # enforce foreign keys like PostgreSQL does
    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        dbapi_connection.execute("PRAGMA foreign_keys=ON")

    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def registry():
    registry = AttemptRegistry()
    yield registry
    registry.clear()


@pytest.fixture
def app(session_factory):
    app = create_app(session_factory=session_factory)

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield app
    app.state.attempts.clear()
    app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    # not entered as a context manager: the lifespan ticker stays off and
    # tests advance timers by hand
    return TestClient(app)


@pytest.fixture
def make_user(db):
    def _make_user(username, role="student", category="sat", level="basics", password="secret"):
        return create_user(db, UserCreate(
            username=username,
            password=password,
            role=role,
            category=category if role == "student" else None,
            level=level if role == "student" else None,
        ))
    return _make_user


@pytest.fixture
def auth_headers():
    def _headers(user):
        token = create_access_token({"sub": str(user.id), "role": user.role})
        return {"Authorization": f"Bearer {token}"}
    return _headers


@pytest.fixture
def admin(make_user):
    return make_user("sara", role="admin")


@pytest.fixture
def student(make_user):
    return make_user("omar", category="sat", level="basics")


THREE_QUESTIONS = [
    {"question": "Q1", "choice_a": "A1", "choice_b": "B1", "choice_c": "C1", "choice_d": "D1", "correct_answer": "a"},
    {"question": "Q2", "choice_a": "A2", "choice_b": "B2", "choice_c": "C2", "choice_d": "D2", "correct_answer": "b"},
    {"question": "Q3", "choice_a": "A3", "choice_b": "B3", "choice_c": "C3", "choice_d": "D3", "correct_answer": "c"},
]


@pytest.fixture
def make_quiz(db):
    def _make_quiz(title="Algebra", time_limit_minutes=0, questions=None, **fields):
        data = {
            "title": title,
            "category": "sat",
            "level": "basics",
            "type": "quiz",
            "time_limit_minutes": time_limit_minutes,
            "questions": THREE_QUESTIONS if questions is None else questions,
        }
        data.update(fields)
        return create_quiz(db, QuizCreate(**data))
    return _make_quiz
