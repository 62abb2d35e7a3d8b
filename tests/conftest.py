import os

# Must be set before autograder.db.session builds its engine
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from autograder import models  # noqa
from autograder.db.base import Base
from autograder.models.assignment import Assignment
from autograder.models.user import User
from autograder.services import submission_service
from tests.data import reading_config

# Test database (in-memory SQLite shared by every session of a test)
TEST_DATABASE_URL = "sqlite://"


@pytest.fixture(scope="function")
def engine():
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    """Create a test database session."""
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(autouse=True)
def enqueued(monkeypatch):
    """Capture scoring jobs instead of talking to Redis."""
    jobs = []

    def fake_enqueue(submission_id):
        jobs.append(submission_id)
        return f"job-{submission_id}"

    monkeypatch.setattr(submission_service, "enqueue_scoring_task", fake_enqueue)
    return jobs


@pytest.fixture
def test_teacher(db_session):
    teacher = User(email="teacher@test.com", name="Test Teacher", role="teacher")
    db_session.add(teacher)
    db_session.commit()
    db_session.refresh(teacher)
    return teacher


@pytest.fixture
def test_student(db_session):
    student = User(email="student@test.com", name="Test Student", role="student")
    db_session.add(student)
    db_session.commit()
    db_session.refresh(student)
    return student


@pytest.fixture
def make_assignment(db_session, test_teacher):
    def _make(assignment_type="reading", assignment_config=None, title="Reading Practice"):
        assignment = Assignment(
            teacher_id=test_teacher.id,
            title=title,
            type=assignment_type,
            assignment_config=assignment_config,
        )
        db_session.add(assignment)
        db_session.commit()
        db_session.refresh(assignment)
        return assignment

    return _make


@pytest.fixture
def reading_assignment(make_assignment):
    return make_assignment("reading", reading_config())
