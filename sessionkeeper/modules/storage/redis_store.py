import logging
from typing import Optional

import redis

from ..session.errors import InitializationError

logger = logging.getLogger(__name__)

# Matches the lifetime of the tracking cookie
DEFAULT_TTL_SECONDS = 604800


class RedisStorage:
    """One Redis string per session id."""

    def __init__(
        self,
        url: str = "redis://localhost:6379/0",
        password: Optional[str] = None,
        key_prefix: str = "session:",
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        client: Optional[redis.Redis] = None,
    ):
        """
        Initialize Redis storage.

        Args:
            url: Redis connection URL
            password: Optional password, passed separately to avoid URL encoding issues
            key_prefix: Prefix of every session key
            ttl_seconds: Server-side expiry of stored blobs
            client: Pre-built client (used as-is, not created from url)
        """
        self.url = url
        self.password = password
        self.key_prefix = key_prefix
        self.ttl_seconds = ttl_seconds
        self._client = client

    def open(self) -> None:
        """Connect (once) and check the server answers."""
        try:
            if self._client is None:
                self._client = redis.Redis.from_url(self.url, password=self.password)
            self._client.ping()
        except redis.RedisError as e:
            logger.error(f"Cannot reach Redis session storage: {e}")
            raise InitializationError("Unable to start session: Redis unavailable") from e

    def read(self, session_id: str) -> Optional[bytes]:
        return self._client.get(self._key(session_id))

    def write(self, session_id: str, data: bytes) -> None:
        self._client.set(self._key(session_id), data, ex=self.ttl_seconds)

    def delete(self, session_id: str) -> None:
        self._client.delete(self._key(session_id))

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

    def _key(self, session_id: str) -> str:
        return f"{self.key_prefix}{session_id}"
