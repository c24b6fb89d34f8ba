"""
Unit tests for the environment configuration provider.
"""

import pytest

from sessionkeeper.config.provider import EnvConfigProvider

ENV_VARS = [
    "SESSION_TTL_MINUTES",
    "SESSION_SALT",
    "SESSION_COOKIE_NAME",
    "SESSION_COOKIE_PREFIX",
    "SESSION_COOKIE_MAX_AGE",
    "SESSION_USE_TRACKING_COOKIE",
    "SESSION_STORAGE_BACKEND",
    "SESSION_STORAGE_PATH",
    "REDIS_URL",
    "REDIS_PASSWORD",
    "REDIS_KEY_PREFIX",
    "API_HOST",
    "API_PORT",
    "API_DEBUG",
    "LOG_LEVEL",
]


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestSessionConfig:
    def test_defaults(self, clean_env):
        config = EnvConfigProvider().get_session_config()
        assert config.default_ttl_minutes is None
        assert config.salt == "Szga-Ot"
        assert config.cookie_name == "S3ss10n"
        assert config.cookie_prefix == "S3ss10n"
        assert config.cookie_max_age == 604800
        assert config.use_tracking_cookie is True

    def test_overrides(self, clean_env):
        clean_env.setenv("SESSION_TTL_MINUTES", "30")
        clean_env.setenv("SESSION_SALT", "pepper")
        clean_env.setenv("SESSION_COOKIE_NAME", "track")
        clean_env.setenv("SESSION_USE_TRACKING_COOKIE", "FALSE")

        config = EnvConfigProvider().get_session_config()

        assert config.default_ttl_minutes == 30
        assert config.salt == "pepper"
        assert config.cookie_name == "track"
        assert config.cookie_prefix == "track"
        assert config.use_tracking_cookie is False

    def test_blank_ttl_is_unbounded(self, clean_env):
        clean_env.setenv("SESSION_TTL_MINUTES", "  ")
        assert EnvConfigProvider().get_session_config().default_ttl_minutes is None

    def test_invalid_integer(self, clean_env):
        clean_env.setenv("SESSION_TTL_MINUTES", "ten")
        with pytest.raises(ValueError, match="SESSION_TTL_MINUTES"):
            EnvConfigProvider().get_session_config()


class TestStorageConfig:
    def test_defaults(self, clean_env):
        config = EnvConfigProvider().get_storage_config()
        assert config.backend == "file"
        assert config.path == "temp"
        assert config.redis_url == "redis://localhost:6379/0"
        assert config.redis_password is None
        assert config.redis_key_prefix == "session:"
        assert config.redis_ttl_seconds == 604800

    def test_redis_settings(self, clean_env):
        clean_env.setenv("SESSION_STORAGE_BACKEND", "redis")
        clean_env.setenv("REDIS_URL", "redis://cache:6379/3")
        clean_env.setenv("REDIS_PASSWORD", "secret")

        config = EnvConfigProvider().get_storage_config()

        assert config.backend == "redis"
        assert config.redis_url == "redis://cache:6379/3"
        assert config.redis_password == "secret"


class TestAPIConfig:
    def test_defaults(self, clean_env):
        config = EnvConfigProvider().get_api_config()
        assert config.host == "0.0.0.0"
        assert config.port == 8080
        assert config.debug is False
        assert config.log_level == "INFO"

    def test_overrides(self, clean_env):
        clean_env.setenv("API_PORT", "9000")
        clean_env.setenv("API_DEBUG", "true")
        clean_env.setenv("LOG_LEVEL", "debug")

        config = EnvConfigProvider().get_api_config()

        assert config.port == 9000
        assert config.debug is True
        assert config.log_level == "DEBUG"
