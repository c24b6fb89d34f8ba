"""
Identity Module - Black Box Interface

Purpose: Derive a stable session identifier from client signals
Interface: derive_id(), derive_identity(), build_fingerprint(), mint_tracking_value()
Hidden: Fingerprint layout, salt, digest algorithm

Pure functions only. Request state is passed in by the caller, never read here.
"""

from .identity import (
    DEFAULT_SALT,
    SEPARATOR,
    TRACKING_PREFIX,
    SessionIdentity,
    build_fingerprint,
    derive_id,
    derive_identity,
    mint_tracking_value,
)

__all__ = [
    "DEFAULT_SALT",
    "SEPARATOR",
    "TRACKING_PREFIX",
    "SessionIdentity",
    "build_fingerprint",
    "derive_id",
    "derive_identity",
    "mint_tracking_value",
]
