import os

# Must be set before quiz_manager.config is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CACHE_ENABLED"] = "false"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
from fastapi.testclient import TestClient

import quiz_manager.models  # noqa: F401
from quiz_manager.database import Base, SessionLocal, engine
from quiz_manager.main import app
from quiz_manager.models import StudentQuiz
from quiz_manager.services.attempt_service import attempt_service
from quiz_manager.services.auth_service import auth_service
from quiz_manager.services.quiz_service import quiz_service
from quiz_manager.session import Role, UserSession


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        auth_service.sessions.clear()
        attempt_service.clear()


@pytest.fixture
def client(db):
    return TestClient(app)


class FakeClock:
    def __init__(self, start=1000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


def question(letter, problem=None):
    return {
        "problem": problem or f"Which option is {letter}?",
        "option_a": "first",
        "option_b": "second",
        "option_c": "third",
        "option_d": "fourth",
        "correct_answer": letter,
    }


@pytest.fixture
def make_quiz(db):
    def _make(name="Python basics", letters=("A", "B", "C"), time_limit=5):
        return quiz_service.create_quiz_with_questions(
            db, name, time_limit, [question(letter) for letter in letters]
        )
    return _make


@pytest.fixture
def teacher_id(db):
    return auth_service.register(db, "teacher1", "secret", "Tina Teacher", Role.LECTURER)


@pytest.fixture
def student_id(db):
    return auth_service.register(db, "alice", "secret", "Alice Student", Role.STUDENT, "S001")


@pytest.fixture
def student_session(student_id):
    return UserSession(user_id=student_id, username="alice", role=Role.STUDENT, full_name="Alice Student")


@pytest.fixture
def assign(db):
    def _assign(student_id, quiz_id):
        db.add(StudentQuiz(student_id=student_id, quiz_id=quiz_id))
        db.commit()
    return _assign
