"""
Session record and lifecycle states.

A record holds the user entries of one session plus its timing metadata.
Expiry is decided by check_expiry(), a pure function of the clock and
the record.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

# Used when no TTL is given: roughly two years, effectively unbounded
UNBOUNDED_TTL_MINUTES = 999999

TTL_KEY = "ttlMinutes"
STARTED_AT_KEY = "startedAt"
ENDED_AT_KEY = "endedAt"
STARTED_KEY = "sessionStarted"
ENTRIES_KEY = "entries"

RESERVED_KEYS = frozenset({TTL_KEY, STARTED_AT_KEY, ENDED_AT_KEY, STARTED_KEY})


class SessionState(str, Enum):
    """Lifecycle state of a session."""

    UNOPENED = "unopened"
    ACTIVE = "active"
    EXPIRED = "expired"
    DESTROYED = "destroyed"


def is_reserved(key: Any) -> bool:
    """Check if a key is metadata that the public interface must not touch."""
    return isinstance(key, str) and key in RESERVED_KEYS


def normalize_ttl(minutes: Optional[int]) -> int:
    """Map missing or non-positive TTLs to the unbounded sentinel."""
    if minutes is None:
        return UNBOUNDED_TTL_MINUTES
    minutes = int(minutes)
    if minutes <= 0:
        return UNBOUNDED_TTL_MINUTES
    return minutes


@dataclass
class SessionRecord:
    """Server-side state of one session id."""

    entries: Dict[str, str] = field(default_factory=dict)
    ttl_minutes: Optional[int] = None
    started_at: Optional[int] = None
    ended_at: Optional[int] = None
    started: bool = False

    @property
    def timing_established(self) -> bool:
        return self.started_at is not None

    def start_timing(self, now: float) -> None:
        """Start (or restart) the expiration window at now."""
        if self.ttl_minutes is None:
            self.ttl_minutes = UNBOUNDED_TTL_MINUTES
        self.started_at = int(now)
        self.ended_at = self.started_at + self.ttl_minutes * 60

    def clear(self) -> None:
        self.entries.clear()

    def to_dict(self) -> Dict[str, Any]:
        return {
            ENTRIES_KEY: dict(self.entries),
            TTL_KEY: self.ttl_minutes,
            STARTED_AT_KEY: self.started_at,
            ENDED_AT_KEY: self.ended_at,
            STARTED_KEY: self.started,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SessionRecord":
        """
        Build a record from its dict form.

        Raises:
            ValueError: data does not have the record layout
        """
        if not isinstance(data, dict):
            raise ValueError("Session record must be a mapping")

        if ENTRIES_KEY not in data:
            raise ValueError("Session record has no entries")
        entries = data[ENTRIES_KEY]
        if not isinstance(entries, dict) or not all(
            isinstance(k, str) and isinstance(v, str) for k, v in entries.items()
        ):
            raise ValueError("Session entries must map strings to serialized strings")

        ttl = data.get(TTL_KEY)
        started_at = data.get(STARTED_AT_KEY)
        ended_at = data.get(ENDED_AT_KEY)
        for name, value in ((TTL_KEY, ttl), (STARTED_AT_KEY, started_at), (ENDED_AT_KEY, ended_at)):
            if value is not None and (isinstance(value, bool) or not isinstance(value, int)):
                raise ValueError(f"Session field {name} must be an integer")

        return cls(
            entries={k: v for k, v in entries.items() if not is_reserved(k)},
            ttl_minutes=ttl,
            started_at=started_at,
            ended_at=ended_at,
            started=bool(data.get(STARTED_KEY, False)),
        )


def check_expiry(now: float, record: Optional[SessionRecord]) -> SessionState:
    """
    Classify a record at a point in time.

    Returns:
        UNOPENED when there is no record or its started marker is absent,
        EXPIRED when the window has no end or now is past it,
        ACTIVE otherwise
    """
    if record is None or not record.started:
        return SessionState.UNOPENED
    if record.ended_at is None or now >= record.ended_at:
        return SessionState.EXPIRED
    return SessionState.ACTIVE
