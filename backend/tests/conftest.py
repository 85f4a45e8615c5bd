"""
Recortes Backend - Test Configuration (conftest.py)
====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   External collaborators are replaced at their seams:
       - Google token verification → FakeTokenVerifier (static token map)
       - Supabase Storage           → FakeBucket behind a real BlobStore
       - PostgreSQL                 → in-memory SQLite (aiosqlite), or an
                                      AsyncMock session for pure unit tests

Fixture Hierarchy (all function-scoped):
    ├── mock_db_session:   AsyncMock session (no database)
    ├── fake_bucket:       records uploads/removals, can be told to fail
    ├── blob_store:        BlobStore wired to fake_bucket
    ├── db_engine:         fresh in-memory SQLite schema per test
    ├── db_session:        AsyncSession on db_engine
    ├── identity_a/b:      two provisioned users
    ├── app:               fresh app with dependency overrides for all three seams
    └── test_client:       HTTPX AsyncClient against `app`
"""

import os

# Settings are read at import time: configure the environment BEFORE any
# recortes import so no test ever reaches a real database or provider
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["SUPABASE_URL"] = "https://test-project.supabase.co"
os.environ["SUPABASE_SERVICE_ROLE_KEY"] = "test-service-role-key"
os.environ["GOOGLE_CLIENT_ID"] = "test-client-id.apps.googleusercontent.com"
os.environ["STORAGE_BUCKET"] = "recortes"
os.environ["LOG_LEVEL"] = "WARNING"

from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from recortes.auth import get_token_verifier
from recortes.database import Base, get_db_session
from recortes.exceptions import AuthError
from recortes.schemas.common import Identity
from recortes.services.blob_store import BlobStore, get_blob_store
from recortes.services.user_service import UserService

SUPABASE_URL = "https://test-project.supabase.co"
PUBLIC_PREFIX = f"{SUPABASE_URL}/storage/v1/object/public/recortes/"

# Minimal PNG signature + IHDR chunk start; enough for content-type based checks
PNG_BYTES = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR" + b"\x00" * 16

# Token → verified claims, as Google would return them
CLAIMS = {
    "token-a": {"sub": "google-sub-a", "email": "ana@example.com", "name": "Ana"},
    "token-b": {"sub": "google-sub-b", "email": "bruno@example.com", "name": "Bruno"},
}


# ══════════════════════════════════════════════════════════════════════════
# Fakes
# ══════════════════════════════════════════════════════════════════════════

class FakeTokenVerifier:
    """Accepts exactly the tokens in CLAIMS."""

    def __init__(self, claims: Optional[Dict[str, Dict[str, Any]]] = None):
        self.claims = claims if claims is not None else CLAIMS
        self.seen: List[str] = []

    async def verify(self, token: str) -> Dict[str, Any]:
        self.seen.append(token)
        if token not in self.claims:
            raise AuthError(AuthError.INVALID_TOKEN, context={"detail": "unknown test token"})
        return dict(self.claims[token])


class FakeBucket:
    """
    Stands in for supabase-py's bucket API (storage.from_(bucket)).

    upload(path, file, file_options) and remove(paths) mirror the real
    signatures; set fail_upload / fail_remove to simulate provider errors.
    """

    def __init__(self):
        self.objects: Dict[str, bytes] = {}
        self.uploads: List[Dict[str, Any]] = []
        self.removed: List[str] = []
        self.fail_upload = False
        self.fail_remove = False

    def upload(self, path, file, file_options=None):
        if self.fail_upload:
            raise RuntimeError("storage unavailable")
        self.uploads.append({"path": path, "size": len(file), "options": dict(file_options or {})})
        self.objects[path] = file
        return {"Key": f"recortes/{path}"}

    def remove(self, paths):
        if self.fail_remove:
            raise RuntimeError("storage unavailable")
        for path in paths:
            self.removed.append(path)
            self.objects.pop(path, None)
        return [{"name": path} for path in paths]


class FakeSupabaseClient:
    def __init__(self, bucket: FakeBucket):
        self.bucket = bucket
        self.requested: List[str] = []
        self.storage = MagicMock()
        self.storage.from_.side_effect = self._from

    def _from(self, name: str) -> FakeBucket:
        self.requested.append(name)
        return self.bucket


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    A MagicMock that simulates AsyncSession behavior.

    Usage:
        mock_db_session.execute.return_value.scalar_one_or_none.return_value = cut
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.refresh = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.delete = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def fake_bucket():
    return FakeBucket()


@pytest.fixture
def blob_store(fake_bucket):
    return BlobStore(client=FakeSupabaseClient(fake_bucket), bucket="recortes", base_url=SUPABASE_URL)


@pytest.fixture
def token_verifier():
    return FakeTokenVerifier()


@pytest_asyncio.fixture
async def db_engine():
    """Fresh in-memory schema; StaticPool keeps the single connection alive."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def identity_a(db_session) -> Identity:
    identity = await UserService(db_session).resolve_identity(CLAIMS["token-a"])
    await db_session.commit()
    return identity


@pytest_asyncio.fixture
async def identity_b(db_session) -> Identity:
    identity = await UserService(db_session).resolve_identity(CLAIMS["token-b"])
    await db_session.commit()
    return identity


@pytest.fixture
def cut_form():
    """A complete, valid multipart body for POST /cuts (text part)."""
    return {
        "sku": "CAM-001",
        "modelName": "Camiseta Básica",
        "cutType": "Frente",
        "position": "Superior",
        "productType": "Camiseta",
        "material": "Algodão",
        "materialColor": "Azul Marinho",
        "displayOrder": "1",
    }


@pytest.fixture
def app(session_factory, blob_store, token_verifier):
    """A fresh application with the database, storage and verifier overridden."""
    from recortes.main import create_app

    app = create_app()

    async def override_db_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_db_session
    app.dependency_overrides[get_blob_store] = lambda: blob_store
    app.dependency_overrides[get_token_verifier] = lambda: token_verifier
    return app


@pytest_asyncio.fixture
async def test_client(app):
    """
    HTTPX AsyncClient against the app fixture.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


def auth(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
