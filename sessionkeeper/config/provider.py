"""Configuration provider following Black Box Design principles."""
import os
from dataclasses import dataclass
from typing import Optional, Protocol


@dataclass
class SessionConfig:
    """Session behaviour configuration."""
    default_ttl_minutes: Optional[int]
    salt: str
    cookie_name: str
    cookie_prefix: str
    cookie_max_age: int
    use_tracking_cookie: bool


@dataclass
class StorageConfig:
    """Session storage configuration."""
    backend: str
    path: str
    redis_url: str
    redis_password: Optional[str]
    redis_key_prefix: str
    redis_ttl_seconds: int


@dataclass
class APIConfig:
    """API configuration."""
    port: int
    host: str
    debug: bool
    log_level: str


class ConfigProvider(Protocol):
    """Protocol for configuration providers."""

    def get_session_config(self) -> SessionConfig:
        """Get session configuration."""
        ...

    def get_storage_config(self) -> StorageConfig:
        """Get storage configuration."""
        ...

    def get_api_config(self) -> APIConfig:
        """Get API configuration."""
        ...


def _get_int(name: str, default: Optional[str]) -> Optional[int]:
    raw = os.getenv(name, default)
    if raw is None or raw.strip() == "":
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def _get_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


class EnvConfigProvider:
    """Environment-based configuration provider."""

    def get_session_config(self) -> SessionConfig:
        """Get session configuration from environment variables."""
        cookie_name = os.getenv("SESSION_COOKIE_NAME", "S3ss10n")
        return SessionConfig(
            # Unset means unbounded
            default_ttl_minutes=_get_int("SESSION_TTL_MINUTES", None),
            salt=os.getenv("SESSION_SALT", "Szga-Ot"),
            cookie_name=cookie_name,
            cookie_prefix=os.getenv("SESSION_COOKIE_PREFIX", cookie_name),
            cookie_max_age=_get_int("SESSION_COOKIE_MAX_AGE", "604800"),
            use_tracking_cookie=_get_bool("SESSION_USE_TRACKING_COOKIE", "true"),
        )

    def get_storage_config(self) -> StorageConfig:
        """Get storage configuration from environment variables."""
        return StorageConfig(
            backend=os.getenv("SESSION_STORAGE_BACKEND", "file"),
            path=os.getenv("SESSION_STORAGE_PATH", "temp"),
            redis_url=os.getenv("REDIS_URL", "redis://localhost:6379/0"),
            redis_password=os.getenv("REDIS_PASSWORD"),  # Optional: for authenticated Redis
            redis_key_prefix=os.getenv("REDIS_KEY_PREFIX", "session:"),
            redis_ttl_seconds=_get_int("SESSION_COOKIE_MAX_AGE", "604800"),
        )

    def get_api_config(self) -> APIConfig:
        """Get API configuration from environment variables."""
        return APIConfig(
            port=_get_int("API_PORT", "8080"),
            host=os.getenv("API_HOST", "0.0.0.0"),
            debug=_get_bool("API_DEBUG", "false"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )
