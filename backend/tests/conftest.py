"""
Pytest configuration and fixtures for backend tests.
"""

import os

# Must be set before the app (and its settings) are imported
os.environ.setdefault("LOG_FILE", "")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient

from main import app
from app.core.cache import CacheService
from app.core.config import Settings
from app.core.dependencies import (
    get_history_service,
    get_index_service,
    get_saved_search_service,
    get_search_service,
)
from app.services.history_service import HistoryService
from app.services.index_service import IndexService
from app.services.result_cache import ResultCache
from app.services.saved_search_service import SavedSearchService
from app.services.search_service import SearchService
from tests.fakes import FakeEngine, FakeRedis


@pytest.fixture
def test_settings() -> Settings:
    return Settings(INDEX_PREFIX="quckapp", LOG_FILE=None, RATE_LIMIT_ENABLED=False)


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def fake_engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture
def result_cache(fake_redis: FakeRedis, test_settings: Settings) -> ResultCache:
    return ResultCache(CacheService(fake_redis), ttl=test_settings.SEARCH_CACHE_TTL)


@pytest.fixture
def search_service(fake_engine, result_cache, test_settings) -> SearchService:
    return SearchService(fake_engine, result_cache, test_settings)


@pytest.fixture
def index_service(fake_engine, result_cache, test_settings) -> IndexService:
    return IndexService(fake_engine, result_cache, test_settings)


@pytest.fixture
def history_service(fake_redis, test_settings) -> HistoryService:
    return HistoryService(fake_redis, max_entries=test_settings.HISTORY_MAX_ENTRIES)


@pytest.fixture
def saved_search_service(fake_redis) -> SavedSearchService:
    return SavedSearchService(fake_redis)


@pytest.fixture(scope="function")
def client(search_service, index_service, history_service, saved_search_service) -> TestClient:
    """Test client wired to in-memory services; the lifespan is not run."""
    app.dependency_overrides[get_search_service] = lambda: search_service
    app.dependency_overrides[get_index_service] = lambda: index_service
    app.dependency_overrides[get_history_service] = lambda: history_service
    app.dependency_overrides[get_saved_search_service] = lambda: saved_search_service

    yield TestClient(app, raise_server_exceptions=False)

    app.dependency_overrides.clear()


@pytest.fixture
def user_headers() -> dict:
    return {"X-User-ID": "user-1"}
