"""
Recortes Backend - Application Package Initializer
===================================================

What: Marks the `recortes` directory as a Python package.
Why:  Enables module imports like `from recortes.config import settings`.
Who:  Used implicitly by Python's import system and explicitly by Alembic, pytest, and uvicorn.

Architecture Note:
    This backend follows a layered architecture:

    ┌─────────────────────────────────────┐
    │      Routes (HTTP Boundary)         │  ← status codes, multipart, auth deps
    ├─────────────────────────────────────┤
    │   Validation + Identity Resolver    │  ← schemas, bearer tokens, users
    ├─────────────────────────────────────┤
    │    Services (Cut lifecycle, blobs)  │  ← ownership scoping, uploads, cleanup
    ├─────────────────────────────────────┤
    │   Models & Schemas (Data)           │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │   Database (Persistence)            │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
