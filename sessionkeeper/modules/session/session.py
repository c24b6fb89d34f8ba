import json
import logging
import time
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional, Union

from ..identity import SessionIdentity
from .record import (
    SessionRecord,
    SessionState,
    check_expiry,
    is_reserved,
    normalize_ttl,
)
from .serializer import decode_snapshot, encode_snapshot, serialize, try_deserialize

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


class Session:
    """
    One client session bound to a storage medium.

    Every accessor runs verify() first, so expiry is discovered lazily on
    the next access. Soft failures are reported as False/None, never raised.
    """

    def __init__(
        self,
        storage,
        identity: SessionIdentity,
        clock: Callable[[], float] = time.time,
        default_ttl_minutes: Optional[int] = None,
        on_detach: Optional[Callable[["Session"], None]] = None,
    ):
        """
        Initialize session.

        Args:
            storage: Storage backend holding one blob per session id
            identity: Derived identity of the client
            clock: Returns the current epoch time in seconds
            default_ttl_minutes: TTL used for fresh records when open() gets none
            on_detach: Called once when the session is destroyed or closed
        """
        self.storage = storage
        self.identity = identity
        self.clock = clock
        self.default_ttl_minutes = default_ttl_minutes
        self._on_detach = on_detach
        self._record: Optional[SessionRecord] = None
        self._state = SessionState.UNOPENED

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def record(self) -> Optional[SessionRecord]:
        return self._record

    # Lifecycle

    def open(self, ttl_minutes: Optional[int] = None, snapshot: Optional[str] = None) -> "Session":
        """
        Attach storage and activate the session.

        An unexpired stored record is reattached with its timing preserved
        unless ttl_minutes is given, which restarts the window from now.

        Args:
            ttl_minutes: Session duration in minutes
            snapshot: Optional snapshot to restore right after opening

        Returns:
            self

        Raises:
            InitializationError: Storage medium could not be attached
        """
        if self._state is SessionState.ACTIVE:
            return self

        self.storage.open()
        now = self.clock()

        record = self._load()
        if record is not None and check_expiry(now, record) is SessionState.EXPIRED:
            logger.info(f"Discarding expired session record {self.get_id()}")
            self.storage.delete(self.get_id())
            record = None

        if record is None:
            record = SessionRecord(ttl_minutes=normalize_ttl(self.default_ttl_minutes))
            logger.debug(f"Created session record {self.get_id()}")
        else:
            logger.debug(f"Reattached session record {self.get_id()}")

        if ttl_minutes is not None:
            record.ttl_minutes = normalize_ttl(ttl_minutes)
            record.start_timing(now)
        elif not record.timing_established:
            record.start_timing(now)
        record.started = True

        self._record = record
        self._state = SessionState.ACTIVE

        if snapshot is not None and not self.restore(snapshot):
            logger.warning(f"Snapshot for session {self.get_id()} could not be restored")

        return self

    def verify(self) -> bool:
        """Check that the session is usable, destroying it if it has expired."""
        if self._record is None:
            return False

        state = check_expiry(self.clock(), self._record)
        if state is SessionState.EXPIRED:
            logger.info(f"Session {self.get_id()} expired")
            self.destroy()
            return False

        return state is SessionState.ACTIVE

    def destroy(self, export_snapshot: bool = False) -> Union[str, bool]:
        """
        Destroy the session.

        Args:
            export_snapshot: Return the encoded record before wiping it

        Returns:
            Snapshot string when requested, True otherwise,
            False if the session is not open
        """
        if self._state is not SessionState.ACTIVE or self._record is None:
            return False

        result: Union[str, bool] = self.export() if export_snapshot else True

        self._record.clear()
        try:
            self.storage.delete(self.get_id())
        finally:
            self._record = None
            self._state = SessionState.DESTROYED
            self._detach()

        logger.info(f"Session {self.get_id()} destroyed")
        return result

    def flush(self) -> None:
        """Persist the record to storage."""
        if self._state is not SessionState.ACTIVE or self._record is None:
            return
        payload = json.dumps(self._record.to_dict(), separators=(",", ":"))
        self.storage.write(self.get_id(), payload.encode("utf-8"))

    def close(self) -> None:
        """Flush and detach without destroying anything."""
        try:
            self.flush()
        finally:
            if self._state is SessionState.ACTIVE:
                self._state = SessionState.UNOPENED
            self._record = None
            self._detach()

    # Key/value interface

    def set(self, key: str, value: Any) -> bool:
        """Store a value. False if inactive, reserved, or not serializable."""
        if not self.verify() or not isinstance(key, str) or is_reserved(key):
            return False

        try:
            data = serialize(value)
        except (TypeError, ValueError, RecursionError) as e:
            logger.warning(f"Value for key {key!r} is not serializable: {e}")
            return False

        self._record.entries[key] = data
        return True

    def get(self, key: str, default: Any = None) -> Any:
        """Read a value. Corrupt data behaves like a missing key."""
        if not self.verify() or not isinstance(key, str) or is_reserved(key):
            return default

        data = self._record.entries.get(key)
        if data is None:
            return default

        ok, value = try_deserialize(data)
        if not ok:
            logger.debug(f"Ignoring corrupt value for key {key!r}")
            return default
        return value

    def key_exists(self, key: str) -> bool:
        if not self.verify() or not isinstance(key, str) or is_reserved(key):
            return False
        return key in self._record.entries

    def destroy_key(self, key: str) -> bool:
        """Remove a key. Removing an absent key succeeds."""
        if not self.verify() or not isinstance(key, str) or is_reserved(key):
            return False
        self._record.entries.pop(key, None)
        return True

    def destroy_all_keys(self) -> bool:
        """Remove every user key; the session stays active."""
        if not self.verify():
            return False
        self._record.clear()
        return True

    def get_all(self) -> Dict[str, Any]:
        if not self.verify():
            return {}

        result = {}
        for key, data in self._record.entries.items():
            ok, value = try_deserialize(data)
            if ok:
                result[key] = value
        return result

    # Snapshots

    def export(self) -> str:
        """Encode the whole record as a snapshot string."""
        if self._record is None:
            return ""
        return encode_snapshot(self._record.to_dict())

    def restore(self, snapshot: str) -> bool:
        """
        Replace the record contents with a snapshot.

        Timing stored in the snapshot replaces the current timing, so a
        restored session keeps the window it was exported with.
        """
        if not self.verify():
            return False

        data = decode_snapshot(snapshot)
        if data is None:
            return False
        try:
            restored = SessionRecord.from_dict(data)
        except ValueError as e:
            logger.debug(f"Rejected snapshot for session {self.get_id()}: {e}")
            return False

        record = self._record
        record.clear()
        record.entries.update(restored.entries)
        if restored.ttl_minutes is not None:
            record.ttl_minutes = normalize_ttl(restored.ttl_minutes)
        if restored.started_at is not None and restored.ended_at is not None:
            record.started_at = restored.started_at
            record.ended_at = restored.ended_at

        logger.info(f"Session {self.get_id()} restored {len(record.entries)} keys")
        return True

    # Timing

    def set_ttl(self, minutes: Optional[int] = None) -> "Session":
        """
        Set the session duration. Non-positive values mean unbounded.

        The end of the window only moves when timing was never started;
        use restart_timing() to force it.
        """
        if self._record is None:
            return self
        self._record.ttl_minutes = normalize_ttl(minutes)
        if not self._record.timing_established:
            self._record.start_timing(self.clock())
        return self

    def restart_timing(self) -> "Session":
        if self._record is not None:
            self._record.start_timing(self.clock())
        return self

    def get_started_at(self) -> str:
        if not self.verify():
            return ""
        return _format_timestamp(self._record.started_at)

    def get_ended_at(self) -> str:
        if not self.verify():
            return ""
        return _format_timestamp(self._record.ended_at)

    # Identity

    def get_id(self) -> str:
        return self.identity.hashed_id

    def get_name(self) -> str:
        """Raw fingerprint the id was derived from."""
        return self.identity.raw_fingerprint

    def __contains__(self, key: str) -> bool:
        return self.key_exists(key)

    def __getitem__(self, key: str) -> Any:
        return self.get(key)

    def __setitem__(self, key: str, value: Any) -> None:
        self.set(key, value)

    def _load(self) -> Optional[SessionRecord]:
        data = self.storage.read(self.get_id())
        if data is None:
            return None
        try:
            return SessionRecord.from_dict(json.loads(data))
        except (ValueError, RecursionError) as e:
            logger.warning(f"Stored record for session {self.get_id()} is corrupt, starting fresh: {e}")
            return None

    def _detach(self) -> None:
        callback, self._on_detach = self._on_detach, None
        if callback is not None:
            callback(self)


def _format_timestamp(value: Optional[int]) -> str:
    if value is None:
        return ""
    return datetime.fromtimestamp(value, tz=timezone.utc).strftime(TIMESTAMP_FORMAT)
