import logging
import time
from typing import Callable, Optional

from ..identity import DEFAULT_SALT, derive_identity
from .session import Session

logger = logging.getLogger(__name__)


class SessionContext:
    """
    Owner of the single active session of one execution context.

    Replaces a process-wide singleton: create one per request and call
    teardown() (or use it as a context manager) when the request ends.
    """

    def __init__(
        self,
        storage,
        clock: Callable[[], float] = time.time,
        default_ttl_minutes: Optional[int] = None,
        salt: str = DEFAULT_SALT,
    ):
        """
        Initialize session context.

        Args:
            storage: Storage backend shared by the sessions of this context
            clock: Returns the current epoch time in seconds
            default_ttl_minutes: TTL for freshly created records
            salt: Constant mixed into every fingerprint
        """
        self.storage = storage
        self.clock = clock
        self.default_ttl_minutes = default_ttl_minutes
        self.salt = salt
        self._session: Optional[Session] = None

    @property
    def current(self) -> Optional[Session]:
        return self._session

    def start(
        self,
        caller_id: Optional[str] = None,
        tracking_value: Optional[str] = None,
        client_addr: Optional[str] = None,
        user_agent: Optional[str] = None,
        ttl_minutes: Optional[int] = None,
        snapshot: Optional[str] = None,
    ) -> Session:
        """
        Get the active session, opening one if none is attached.

        Raises:
            InitializationError: Storage medium could not be attached
        """
        if self._session is not None:
            return self._session

        identity = derive_identity(caller_id, tracking_value, client_addr, user_agent, salt=self.salt)
        session = Session(
            self.storage,
            identity,
            clock=self.clock,
            default_ttl_minutes=self.default_ttl_minutes,
            on_detach=self._forget,
        )
        session.open(ttl_minutes=ttl_minutes, snapshot=snapshot)

        self._session = session
        logger.debug(f"Session {identity.hashed_id} attached to context")
        return session

    def teardown(self) -> None:
        """Flush and detach the active session. Always releases it."""
        session, self._session = self._session, None
        if session is None:
            return
        try:
            session.close()
        except Exception:
            logger.error(f"Failed to flush session {session.get_id()}", exc_info=True)
            raise

    def _forget(self, session: Session) -> None:
        if self._session is session:
            self._session = None

    def __enter__(self) -> "SessionContext":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.teardown()
