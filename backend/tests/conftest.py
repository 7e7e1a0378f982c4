"""
CourseHub Backend: Test Configuration (conftest.py)
===================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Tests run against a throwaway SQLite file through aiosqlite. Tables
       are created before and dropped after every test, so each test starts
       from an empty database.

Fixture Hierarchy (all function-scoped):
    ├── database:        create_all / drop_all + engine disposal (autouse)
    ├── db_session:      AsyncSession for calling services directly
    ├── seed:            two instructors, three students, two courses
    ├── mock_db_session: AsyncMock session for pure unit tests
    ├── auth_headers:    helper building a Bearer header for a user
    └── test_client:     HTTPX AsyncClient wired to the ASGI app
"""

import os
import tempfile
from dataclasses import dataclass
from typing import Callable, Dict
from unittest.mock import AsyncMock, MagicMock

# Settings are read at import time: configure BEFORE importing coursehub
_TEST_DIR = tempfile.mkdtemp(prefix="coursehub_test_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_DIR}/test.db"
os.environ["JWT_SECRET_KEY"] = "test-secret-key-not-for-production"
os.environ["RATE_LIMIT_REQUESTS"] = "100000"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from coursehub.database import (  # noqa: E402
    async_session_factory,
    create_all_tables,
    dispose_engine,
    drop_all_tables,
)
from coursehub.models import Course, User, UserRole  # noqa: E402
from coursehub.security import create_access_token  # noqa: E402


# ══════════════════════════════════════════════════════════════════════════
# Database
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture(autouse=True)
async def database():
    await create_all_tables()
    yield
    await drop_all_tables()
    # Pooled aiosqlite connections belong to this test's event loop
    await dispose_engine()


@pytest_asyncio.fixture
async def db_session():
    async with async_session_factory() as session:
        yield session


@dataclass
class Seed:
    instructor: User
    other_instructor: User
    student: User
    classmate: User
    outsider: User
    course: Course
    other_course: Course


@pytest_asyncio.fixture
async def seed(db_session) -> Seed:
    """
    Two courses:
        course        taught by `instructor`; `student` and `classmate` enrolled
        other_course  taught by `other_instructor`; `outsider` enrolled
    """
    instructor = User(username="prof_ada", name="Ada Lovelace", email="ada@example.edu",
                      role=UserRole.INSTRUCTOR.value)
    other_instructor = User(username="prof_alan", name="Alan Turing",
                            email="alan@example.edu", role=UserRole.INSTRUCTOR.value)
    student = User(username="grace", name="Grace Hopper", email="grace@example.edu",
                   role=UserRole.STUDENT.value)
    classmate = User(username="linus", name="Linus Pauling", email="linus@example.edu",
                     role=UserRole.STUDENT.value)
    outsider = User(username="edsger", name="Edsger Dijkstra", email="edsger@example.edu",
                    role=UserRole.STUDENT.value)

    course = Course(title="Compilers 101", description="Parsing and code generation",
                    instructor=instructor, enrolled_students=[student, classmate])
    other_course = Course(title="Computability", instructor=other_instructor,
                          enrolled_students=[outsider])

    db_session.add_all([instructor, other_instructor, student, classmate, outsider,
                        course, other_course])
    await db_session.commit()
    return Seed(instructor, other_instructor, student, classmate, outsider,
                course, other_course)


@pytest.fixture
def mock_db_session():
    """
    A MagicMock that simulates AsyncSession behavior.

    Usage:
        mock_db_session.execute.side_effect = OperationalError(...)
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


# ══════════════════════════════════════════════════════════════════════════
# HTTP
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def auth_headers() -> Callable[[User], Dict[str, str]]:
    def _headers(user: User) -> Dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user)}"}
    return _headers


@pytest.fixture
def app():
    from coursehub.main import app
    return app


@pytest_asyncio.fixture
async def test_client(app):
    """
    HTTPX AsyncClient routed directly into the FastAPI app.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
