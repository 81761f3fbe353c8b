"""
Global pytest fixtures for the Shortlink test suite.

Responsibilities:
    - Provide a fresh FastAPI TestClient via the app factory for integration tests
    - Provide isolated in-memory and SQLite storage/allocator fixtures
    - Provide service fixtures (shortening, redirect, url manager) wired to them

Using `create_app()` with injected in-memory storage gives each test fresh
state and keeps tests independent of SHORTLINK_STORAGE_BACKEND.
"""

import pytest
from fastapi.testclient import TestClient

from main import create_app
from shortlink.analytics.analytics import Analytics
from shortlink.manager.redirect import RedirectService
from shortlink.manager.shortening import ShorteningService
from shortlink.manager.url_manager import UrlManager
from shortlink.storage.sqlite_storage import SQLiteSequenceAllocator, SQLiteStorage
from shortlink.storage.storage import SequenceAllocator, Storage

@pytest.fixture
def storage() -> Storage:
    """Fresh in-memory record store."""
    return Storage()


@pytest.fixture
def allocator() -> SequenceAllocator:
    """Fresh in-memory sequence allocator."""
    return SequenceAllocator()


@pytest.fixture
def sqlite_path(tmp_path) -> str:
    return str(tmp_path / "shortlink-test.db")


@pytest.fixture
def sqlite_storage(sqlite_path) -> SQLiteStorage:
    return SQLiteStorage(path=sqlite_path, timeout=30)


@pytest.fixture
def sqlite_allocator(sqlite_path) -> SQLiteSequenceAllocator:
    return SQLiteSequenceAllocator(path=sqlite_path, timeout=30)


@pytest.fixture
def analytics() -> Analytics:
    return Analytics()


@pytest.fixture
def shortener(allocator, storage) -> ShorteningService:
    return ShorteningService(allocator, storage)


@pytest.fixture
def redirector(storage, analytics) -> RedirectService:
    return RedirectService(storage, analytics=analytics)


@pytest.fixture
def url_manager(storage) -> UrlManager:
    return UrlManager(storage, max_limit=50)


@pytest.fixture
def app(storage, allocator):
    return create_app(storage=storage, allocator=allocator)


@pytest.fixture
def client(app) -> TestClient:
    """Fresh TestClient over an app with its own in-memory storage."""
    return TestClient(app)
