"""
Root conftest.py for docscan tests.

This file provides:
1. Common pytest markers for test categorization
2. Shared fixtures for an in-memory backend client and the API app
3. Small helpers for building upload batches
"""

from __future__ import annotations

import datetime as dt

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from docscan.api import create_app
from docscan.app.settings import AppSettings
from docscan.backend import BackendClient, MemoryIdentity, MemoryRecordStore, MemoryStorage, Session
from docscan.documents.models import LocalFile


# =============================================================================
# PYTEST CONFIGURATION
# =============================================================================


def pytest_collection_modifyitems(config, items):
    """Tag tests by folder so `-m api` / `-m backend` select them."""
    for item in items:
        norm = str(item.fspath).replace("\\", "/")
        if "/tests/api/" in norm:
            item.add_marker(pytest.mark.api)
        if "/tests/unit/backend/" in norm:
            item.add_marker(pytest.mark.backend)
        if "auth" in norm or "identity" in norm or "request_size" in norm:
            item.add_marker(pytest.mark.security)


def pytest_configure(config):
    # Ensure custom markers are registered even if pyproject.toml isn't picked up in some contexts
    for name, desc in [
        ("documents", "Document workflow tests"),
        ("backend", "Backend client implementation tests"),
        ("api", "HTTP API tests"),
        ("security", "Auth and request hardening tests"),
        ("integration", "Tests that touch a real database engine"),
    ]:
        config.addinivalue_line("markers", f"{name}: {desc}")


# =============================================================================
# HELPERS
# =============================================================================


def make_files(*names: str, content: bytes = b"%PDF-1.4 test") -> list[LocalFile]:
    """Build an upload batch from filenames."""
    return [LocalFile(name=n, content=content) for n in names]


class FixedClock:
    """Deterministic clock that advances one second per call."""

    def __init__(self, start: dt.datetime | None = None):
        self.now = start or dt.datetime(2026, 10, 18, 9, 0, tzinfo=dt.timezone.utc)

    def __call__(self) -> dt.datetime:
        current = self.now
        self.now = current + dt.timedelta(seconds=1)
        return current


# =============================================================================
# BACKEND FIXTURES
# =============================================================================


@pytest.fixture
def settings() -> AppSettings:
    return AppSettings()


@pytest.fixture
def identity() -> MemoryIdentity:
    return MemoryIdentity()


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage(signing_secret="test-secret")


@pytest.fixture
def records() -> MemoryRecordStore:
    return MemoryRecordStore(clock=FixedClock())


@pytest.fixture
def backend(identity, storage, records) -> BackendClient:
    """In-memory backend client shared by workflow and API tests."""
    return BackendClient(identity=identity, storage=storage, records=records)


@pytest.fixture
def token(identity) -> str:
    return identity.issue("user_123", email="user@example.com")


@pytest.fixture
def session(token) -> Session:
    return Session(user_id="user_123", email="user@example.com", token=token)


@pytest.fixture
def other_session(identity) -> Session:
    other = identity.issue("user_456")
    return Session(user_id="user_456", token=other)


# =============================================================================
# API FIXTURES
# =============================================================================


@pytest.fixture
def app(backend, settings):
    return create_app(backend=backend, settings=settings)


@pytest_asyncio.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as c:
        yield c


@pytest.fixture
def auth_headers(token) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
