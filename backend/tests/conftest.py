import os
import sys
from pathlib import Path
import uuid
import time

import pytest
from fastapi.testclient import TestClient

backend_dir = Path(__file__).resolve().parents[1]
if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("RATE_LIMIT_BACKEND", "redis")

from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from quizlink.db.base import Base
from quizlink.db import session as session_module
from quizlink.main import create_app
from quizlink.core.security import create_access_token

# Import models so that they are registered in Base.metadata before create_all.
from quizlink.models.quiz import Quiz, Question  # noqa: F401
from quizlink.models.submission import Submission  # noqa: F401


class _MemoryRedis:
    def __init__(self):
        self._data: dict[str, tuple[str, float | None]] = {}

    def ping(self):
        return True

    def _now(self) -> float:
        return time.time()

    def _get_entry(self, key: str):
        v = self._data.get(key)
        if not v:
            return None
        value, exp = v
        if exp is not None and exp <= self._now():
            self._data.pop(key, None)
            return None
        return value, exp

    def get(self, key: str):
        entry = self._get_entry(key)
        return entry[0] if entry else None

    def set(self, key: str, value: str, ex: int | None = None):
        exp = (self._now() + int(ex)) if ex else None
        self._data[key] = (value, exp)
        return True

    def delete(self, key: str):
        self._data.pop(key, None)
        return 1

    def incr(self, key: str):
        cur = self.get(key)
        n = int(cur or 0) + 1
        _, exp = self._data.get(key, ("", None))
        self._data[key] = (str(n), exp)
        return n

    def expire(self, key: str, seconds: int):
        entry = self._get_entry(key)
        if not entry:
            return False
        value, _ = entry
        self._data[key] = (value, self._now() + int(seconds))
        return True

    def ttl(self, key: str):
        entry = self._get_entry(key)
        if not entry:
            return -2
        _, exp = entry
        if exp is None:
            return -1
        return max(0, int(exp - self._now()))

    def flushall(self):
        self._data.clear()
        return True


# Configure test DB (SQLite in-memory) at import time so all tests importing
# quizlink.db.session.SessionLocal will get the patched version.
_engine = create_engine(
    "sqlite+pysqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
Base.metadata.create_all(bind=_engine)
session_module.engine = _engine
session_module.SessionLocal = session_module.sessionmaker(autocommit=False, autoflush=False, bind=_engine)


# Stub Redis at import time (rate limiting + readiness probe).
_mem_redis = _MemoryRedis()
import quizlink.core.redis_client as redis_client_module

redis_client_module.get_redis = lambda: _mem_redis

import quizlink.core.rate_limit as rate_limit_module
rate_limit_module.get_redis = lambda: _mem_redis

import quizlink.routers.health as health_router_module
health_router_module.get_redis = lambda: _mem_redis


@pytest.fixture(autouse=True)
def _reset_rate_limits():
    _mem_redis.flushall()
    rate_limit_module.reset_memory_limiters()
    yield


@pytest.fixture()
def mem_redis():
    return _mem_redis


@pytest.fixture(scope="session")
def client():
    app = create_app()

    # Ensure app dependencies use our session factory.
    def _get_db_override():
        db = session_module.SessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[session_module.get_db] = _get_db_override
    return TestClient(app)


@pytest.fixture()
def db():
    with session_module.SessionLocal() as session:
        yield session


@pytest.fixture()
def teacher_id():
    return f"teacher_{uuid.uuid4().hex[:8]}"


@pytest.fixture()
def auth_headers(teacher_id):
    return {"Authorization": f"Bearer {create_access_token(teacher_id)}"}


@pytest.fixture()
def other_auth_headers():
    return {"Authorization": f"Bearer {create_access_token(f'teacher_{uuid.uuid4().hex[:8]}')}"}


SAMPLE_QUESTIONS = [
    {
        "kind": "single-choice",
        "text": "What is 2 + 2?",
        "options": ["3", "4", "5", "6"],
        "answerKey": "4",
        "points": 1,
        "explanation": "2 + 2 equals 4",
    },
    {
        "kind": "multi-choice",
        "text": "Select A and C",
        "options": ["A", "B", "C"],
        "answerKey": ["A", "C"],
        "points": 2,
    },
]


@pytest.fixture()
def quiz_factory(client, auth_headers):
    """Create a quiz through the API, published unless told otherwise."""

    def _make(*, questions=None, publish=True, headers=None, **fields):
        hdrs = headers or auth_headers
        body = {"title": "Sample Math Quiz", "questions": SAMPLE_QUESTIONS if questions is None else questions}
        body.update(fields)
        r = client.post("/quizzes", json=body, headers=hdrs)
        assert r.status_code == 201, r.text
        quiz = r.json()
        if publish:
            r = client.put(f"/quizzes/{quiz['id']}", json={"isPublished": True}, headers=hdrs)
            assert r.status_code == 200, r.text
            quiz = r.json()
        return quiz

    return _make
