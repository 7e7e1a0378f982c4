"""
CourseHub Backend: Application Package
======================================

What: Course discussion forums, course-scoped direct messaging and the
      notification feed of the CourseHub learning platform.
Who:  Imported by uvicorn (`coursehub.main:app`), Alembic, pytest and the
      `coursehub.client` SDK.

Architecture Note:
    The backend keeps the usual layered split:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Services (authorization + CRUD)   │  ← ownership / membership checks
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Routes never touch the ORM directly; services never see a Request.
"""

__version__ = "1.0.0"
