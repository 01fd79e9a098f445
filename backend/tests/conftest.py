"""Shared fixtures: a fresh in-memory schema per test, model factories and an API client."""

import itertools
import os

os.environ["TESTING"] = "True"
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import pytest
from fastapi.testclient import TestClient

from skillverse.core.database import DatabaseManager, SessionLocal, get_db
from skillverse.core.security import create_access_token, get_password_hash
from skillverse.main import app
from skillverse.models import Course, Lesson, User, UserRole

TEST_PASSWORD = "password123"
TEST_PASSWORD_HASH = get_password_hash(TEST_PASSWORD)

_ids = itertools.count(1)


@pytest.fixture
def db():
    DatabaseManager.create_all_tables()
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        DatabaseManager.drop_all_tables()


@pytest.fixture
def make_user(db):
    def _make_user(points: int = 0, role: str = UserRole.LEARNER.value, email: str | None = None) -> User:
        n = next(_ids)
        user = User(
            email=email or f"user{n}@example.com",
            hashed_password=TEST_PASSWORD_HASH,
            full_name=f"User {n}",
            role=role,
            points=points,
        )
        db.add(user)
        db.commit()
        return user

    return _make_user


@pytest.fixture
def make_course(db):
    def _make_course(
        points_cost: int = 0,
        points_reward: int = 0,
        lessons: int = 1,
        is_published: bool = True,
        instructor: User | None = None,
    ) -> Course:
        n = next(_ids)
        course = Course(
            title=f"Course {n}",
            description="A course",
            instructor_id=instructor.id if instructor else None,
            is_published=is_published,
            points_cost=points_cost,
            points_reward=points_reward,
        )
        db.add(course)
        db.flush()
        for order in range(1, lessons + 1):
            db.add(Lesson(course_id=course.id, title=f"Lesson {order}", lesson_order=order, duration_minutes=10))
        db.commit()
        return course

    return _make_course


@pytest.fixture
def add_lesson(db):
    def _add_lesson(course: Course, title: str = "Late lesson") -> Lesson:
        order = len(course.lessons) + 1
        lesson = Lesson(course_id=course.id, title=title, lesson_order=order, duration_minutes=5)
        db.add(lesson)
        db.commit()
        return lesson

    return _add_lesson


@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    def _auth_headers(user: User) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(subject=user.id)}"}

    return _auth_headers
