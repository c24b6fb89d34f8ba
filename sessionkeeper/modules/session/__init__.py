"""
Session Module - Black Box Interface

Purpose: Manage the lifecycle of request-scoped client sessions
Interface: SessionContext.start(), Session get/set/destroy/restore, check_expiry()
Hidden: Record layout, expiry bookkeeping, value serialization

Replaceable storage: sessions only talk to a backend through open/read/write/delete.
"""

from .context import SessionContext
from .errors import InitializationError
from .record import (
    RESERVED_KEYS,
    UNBOUNDED_TTL_MINUTES,
    SessionRecord,
    SessionState,
    check_expiry,
    is_reserved,
    normalize_ttl,
)
from .serializer import decode_snapshot, encode_snapshot, serialize, try_deserialize
from .session import Session

__all__ = [
    "RESERVED_KEYS",
    "UNBOUNDED_TTL_MINUTES",
    "InitializationError",
    "Session",
    "SessionContext",
    "SessionRecord",
    "SessionState",
    "check_expiry",
    "decode_snapshot",
    "encode_snapshot",
    "is_reserved",
    "normalize_ttl",
    "serialize",
    "try_deserialize",
]
