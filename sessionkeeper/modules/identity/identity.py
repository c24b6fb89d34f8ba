import hashlib
import time
from dataclasses import dataclass
from typing import Optional

SEPARATOR = "/"
DEFAULT_SALT = "Szga-Ot"
TRACKING_PREFIX = "S3ss10n"


@dataclass(frozen=True)
class SessionIdentity:
    """Derived session identity: the raw fingerprint and its digest."""

    raw_fingerprint: str
    hashed_id: str


def build_fingerprint(
    caller_id: Optional[str],
    tracking_value: Optional[str],
    client_addr: Optional[str],
    user_agent: Optional[str],
    salt: str = DEFAULT_SALT,
) -> str:
    """
    Build the composite fingerprint for a client.

    Layout: tracking cookie / client address / salt / user agent / caller id.
    Missing inputs become empty strings.
    """
    parts = [tracking_value, client_addr, salt, user_agent, caller_id]
    return SEPARATOR.join(part or "" for part in parts)


def derive_id(
    caller_id: Optional[str],
    tracking_value: Optional[str],
    client_addr: Optional[str],
    user_agent: Optional[str],
    salt: str = DEFAULT_SALT,
) -> str:
    """
    Derive the session id for a client.

    Args:
        caller_id: Optional id supplied by the application (e.g. a user id)
        tracking_value: Value of the long-lived tracking cookie
        client_addr: Client network address
        user_agent: Client User-Agent header
        salt: Constant mixed into every fingerprint

    Returns:
        32 character hex digest, also used as the storage key
    """
    fingerprint = build_fingerprint(caller_id, tracking_value, client_addr, user_agent, salt)
    return _digest(fingerprint)


def derive_identity(
    caller_id: Optional[str],
    tracking_value: Optional[str],
    client_addr: Optional[str],
    user_agent: Optional[str],
    salt: str = DEFAULT_SALT,
) -> SessionIdentity:
    """Derive both the raw fingerprint and the hashed id."""
    fingerprint = build_fingerprint(caller_id, tracking_value, client_addr, user_agent, salt)
    return SessionIdentity(raw_fingerprint=fingerprint, hashed_id=_digest(fingerprint))


def mint_tracking_value(prefix: str = TRACKING_PREFIX, now: Optional[float] = None) -> str:
    """Mint a new tracking cookie value: prefix plus the current epoch second."""
    if now is None:
        now = time.time()
    return f"{prefix}{SEPARATOR}{int(now)}"


def _digest(fingerprint: str) -> str:
    # Not a security boundary, only determinism and spread matter
    return hashlib.md5(fingerprint.encode("utf-8"), usedforsecurity=False).hexdigest()
