import os

os.environ.setdefault("CREDITBOARD_DATABASE_URL", "sqlite://")
os.environ.setdefault("CREDITBOARD_SCHEDULER_ENABLED", "false")
os.environ.setdefault("CREDITBOARD_LEDGER_RETRY_ATTEMPTS", "3")
os.environ.setdefault("CREDITBOARD_LEDGER_RETRY_BASE_DELAY", "0")
os.environ.setdefault("CREDITBOARD_LEDGER_RETRY_MAX_DELAY", "0")
os.environ.setdefault("CREDITBOARD_PROMOTION_SECRET", "let-me-organize")

import uuid

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from creditboard.core.context import Actor
from creditboard.core.database import Base, get_db
from creditboard.main import app
from creditboard.models import Enrollment, UserRole
from creditboard.services import course_service, user_service

# Use in-memory SQLite for testing to ensure isolation
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def session():
    """
    Create a fresh database session for each test.
    """
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(session):
    """
    Create a TestClient that uses the override_get_db dependency.
    """
    def override_get_db():
        try:
            yield session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def make_user(session, display_name, role=UserRole.STUDENT):
    user = user_service.register(session, user_id=uuid.uuid4(), display_name=display_name)
    user.role = role
    session.commit()
    return user


def actor_for(user):
    return Actor(user_id=user.user_id, role=user.role)


def headers_for(user):
    return {"X-User-Id": str(user.user_id)}


@pytest.fixture
def organizer(session):
    return make_user(session, "Olivia Organizer", role=UserRole.ORGANIZER)


@pytest.fixture
def student(session):
    return make_user(session, "Sam Student")


@pytest.fixture
def course(session, organizer, student):
    course = course_service.create_course(session, actor=actor_for(organizer), title="Intro to Robotics")
    session.add(Enrollment(course_id=course.course_id, user_id=student.user_id))
    session.commit()
    return course


@pytest.fixture
def lecture(session, organizer, course):
    lecture = course_service.create_lecture(
        session,
        actor=actor_for(organizer),
        course_id=course.course_id,
        title="Sensors and Actuators",
    )
    session.commit()
    return lecture
