"""
CourseHub Backend: Database Session Management
==============================================

What:  The async engine, the session factory and `get_db_session`.
How:   One AsyncSession per HTTP request; the request commits as a whole
       when the handler returns and rolls back when it raises.
Who:   Routes (through Depends), security.get_current_user, the health
       check, Alembic's env.py and the test fixtures.

Connection Pooling Strategy:
    pool_size=20:      Persistent connections for normal load
    max_overflow=10:   Temporary connections for traffic spikes (total max = 30)
    pool_pre_ping:     Validates connections before use
    pool_recycle=3600: Recycles connections every hour

    SQLite (tests, local experiments) gets the dialect's default pool; the
    sizing arguments above are PostgreSQL-only.
"""

from typing import Any, AsyncGenerator, Dict

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from coursehub.config import settings


def _engine_options() -> Dict[str, Any]:
    options: Dict[str, Any] = {"echo": settings.log_level == "DEBUG"}
    if not settings.is_sqlite:
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            pool_recycle=3600,
        )
    return options


# ── Engine Configuration ──────────────────────────────────────────────────
engine = create_async_engine(settings.database_url, **_engine_options())

# ── Session Factory ───────────────────────────────────────────────────────
# expire_on_commit=False: attributes stay readable after commit, so response
# building never triggers an implicit (and, under asyncio, illegal) lazy load.
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Declarative base; Alembic autogenerate and create_all() read its metadata."""


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Request-scoped session.

    A request is the unit of work: a forum post and the notifications it
    fans out are committed together or not at all.
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def create_all_tables() -> None:
    """
    Create every table known to `Base.metadata`.

    Production schemas are managed by Alembic; this is for the test-suite
    and throwaway SQLite databases.
    """
    # Registers every model with the metadata before create_all runs
    import coursehub.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_all_tables() -> None:
    """Drop every table known to `Base.metadata` (test teardown)."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


async def dispose_engine() -> None:
    """Close pooled connections (app shutdown, and after each test)."""
    await engine.dispose()
