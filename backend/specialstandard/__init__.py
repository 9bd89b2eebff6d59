"""
SpecialStandard Backend — Application Package
==============================================

What: REST backend for a speech-therapy practice (students, therapists,
      sessions, curriculum themes and resources, games).
Who:  Imported by uvicorn (`specialstandard.main:app`), Alembic and pytest.

Architecture Note:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │  Services (auth, storage, email)    │  ← External collaborators
    ├─────────────────────────────────────┤
    │   Repositories (one per entity)     │  ← Only layer that runs SQL
    ├─────────────────────────────────────┤
    │  Query (filters, builder, mapper)   │  ← Pure, no I/O
    ├─────────────────────────────────────┤
    │        Database (asyncpg pool)      │  ← Connection lifecycle
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
