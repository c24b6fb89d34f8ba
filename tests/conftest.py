"""
Shared pytest fixtures for SessionKeeper tests.

This module provides common fixtures including:
- FakeClock: controllable epoch clock for expiry tests
- File and in-memory Redis storage for session tests
- FastAPI test client utilities
"""

import os
import sys
from unittest.mock import MagicMock

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sessionkeeper.config.provider import SessionConfig, StorageConfig
from sessionkeeper.modules.identity import derive_identity
from sessionkeeper.modules.session import Session, SessionContext
from sessionkeeper.modules.storage import FileStorage

# 2024-01-01 00:00:00 UTC
START_TIME = 1704067200


class FakeClock:
    """Epoch clock that only moves when told to."""

    def __init__(self, now: float = START_TIME):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def file_storage(tmp_path):
    """File storage rooted in a temporary directory."""
    return FileStorage(tmp_path / "sessions")


@pytest.fixture
def identity():
    return derive_identity("u1", "S3ss10n/1704067200", "10.0.0.1", "pytest-agent")


@pytest.fixture
def session(file_storage, identity, clock):
    """Open session backed by file storage and the fake clock."""
    return Session(file_storage, identity, clock=clock).open()


@pytest.fixture
def context(file_storage, clock):
    return SessionContext(file_storage, clock=clock)


@pytest.fixture
def mock_redis_with_data():
    """
    Synchronous Redis mock with in-memory data storage.

    This allows testing code that reads back what it writes.
    """
    storage = {}

    redis = MagicMock()

    def mock_set(key, value, ex=None, **kwargs):
        storage[key] = value
        return True

    def mock_get(key):
        return storage.get(key)

    def mock_delete(*keys):
        count = 0
        for key in keys:
            if key in storage:
                del storage[key]
                count += 1
        return count

    redis.set = MagicMock(side_effect=mock_set)
    redis.get = MagicMock(side_effect=mock_get)
    redis.delete = MagicMock(side_effect=mock_delete)
    redis.ping = MagicMock(return_value=True)
    redis._storage = storage  # Expose for test assertions

    return redis


class StaticConfigProvider:
    """Config provider with fixed values for app tests."""

    def __init__(self, storage_path, default_ttl_minutes=None, use_tracking_cookie=True):
        self.storage_path = str(storage_path)
        self.default_ttl_minutes = default_ttl_minutes
        self.use_tracking_cookie = use_tracking_cookie

    def get_session_config(self) -> SessionConfig:
        return SessionConfig(
            default_ttl_minutes=self.default_ttl_minutes,
            salt="Szga-Ot",
            cookie_name="S3ss10n",
            cookie_prefix="S3ss10n",
            cookie_max_age=604800,
            use_tracking_cookie=self.use_tracking_cookie,
        )

    def get_storage_config(self) -> StorageConfig:
        return StorageConfig(
            backend="file",
            path=self.storage_path,
            redis_url="redis://localhost:6379/0",
            redis_password=None,
            redis_key_prefix="session:",
            redis_ttl_seconds=604800,
        )

    def get_api_config(self):
        raise NotImplementedError


@pytest.fixture
def config_provider(tmp_path):
    return StaticConfigProvider(tmp_path / "api-sessions")


# =============================================================================
# Test Markers Configuration
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: Integration tests requiring infrastructure"
    )
