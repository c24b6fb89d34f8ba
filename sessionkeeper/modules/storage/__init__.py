"""
Storage Module - Black Box Interface

Purpose: Persist one opaque blob per session id
Interface: open(), read(), write(), delete(), close(), create_storage()
Hidden: Directory layout, Redis specifics, connection handling

Can be replaced with any storage backend without affecting other modules.
"""

import logging
from typing import Optional, Protocol

from .file import FileStorage
from .redis_store import RedisStorage

logger = logging.getLogger(__name__)


class StorageBackend(Protocol):
    """Protocol for session storage backends."""

    def open(self) -> None:
        """
        Attach the storage medium. Safe to call more than once.

        Raises:
            InitializationError: Medium cannot be created or reached
        """
        ...

    def read(self, session_id: str) -> Optional[bytes]:
        """Return the stored blob, or None if there is none."""
        ...

    def write(self, session_id: str, data: bytes) -> None:
        ...

    def delete(self, session_id: str) -> None:
        """Remove the blob. Deleting a missing blob succeeds."""
        ...

    def close(self) -> None:
        ...


def create_storage(storage_config) -> StorageBackend:
    """
    Build the storage backend selected by configuration.

    Args:
        storage_config: StorageConfig from the config provider

    Returns:
        Unopened storage backend

    Raises:
        ValueError: Unknown backend name
    """
    backend = storage_config.backend.lower()
    if backend == "file":
        logger.info(f"Using file session storage at {storage_config.path}")
        return FileStorage(storage_config.path)
    if backend == "redis":
        logger.info("Using Redis session storage")
        return RedisStorage(
            storage_config.redis_url,
            password=storage_config.redis_password,
            key_prefix=storage_config.redis_key_prefix,
            ttl_seconds=storage_config.redis_ttl_seconds,
        )
    raise ValueError(f"Unknown session storage backend: {storage_config.backend}")


__all__ = ["FileStorage", "RedisStorage", "StorageBackend", "create_storage"]
