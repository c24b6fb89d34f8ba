import logging
import time
from typing import Callable, Iterator, Optional

from fastapi import Request, Response

from ..identity import TRACKING_PREFIX, mint_tracking_value
from ..session import Session, SessionContext

logger = logging.getLogger(__name__)

CALLER_ID_HEADER = "X-Session-Id"
LOCAL_TRACKING_VALUE = "local"
LOCAL_HOSTS = ("localhost",)

# One week
DEFAULT_COOKIE_MAX_AGE = 604800


class TrackingCookie:
    """
    Long-lived cookie that tells clients on the same address apart.

    The value is minted once per client and re-sent on every request.
    """

    def __init__(
        self,
        name: str = TRACKING_PREFIX,
        max_age: int = DEFAULT_COOKIE_MAX_AGE,
        prefix: Optional[str] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.name = name
        self.max_age = max_age
        self.prefix = prefix or name
        self.clock = clock

    def get_cookie(self, request: Request) -> Optional[str]:
        return request.cookies.get(self.name) or None

    def set_cookie(self, response: Response, value: str) -> None:
        response.set_cookie(
            key=self.name,
            value=value,
            max_age=self.max_age,
            httponly=True,
            samesite="lax",
        )

    def ensure(self, request: Request, response: Response) -> str:
        """
        Return the client's tracking value, minting and setting it if missing.

        Requests addressed to localhost share the fixed value "local".
        """
        if request.url.hostname in LOCAL_HOSTS:
            return LOCAL_TRACKING_VALUE

        value = self.get_cookie(request)
        if value:
            return value

        value = mint_tracking_value(self.prefix, now=self.clock())
        self.set_cookie(response, value)
        logger.debug(f"Minted tracking cookie {self.name}")
        return value


def session_scope(request: Request, response: Response) -> Iterator[Session]:
    """
    FastAPI dependency yielding the session of the current request.

    Expects app.state to carry storage, session_config and tracking_cookie
    (and optionally clock). The session is flushed and detached when the
    request finishes, including on error paths.

    Raises:
        InitializationError: Storage medium could not be attached
    """
    state = request.app.state
    config = state.session_config
    clock = getattr(state, "clock", time.time)

    tracking_value = ""
    if config.use_tracking_cookie:
        tracking_value = state.tracking_cookie.ensure(request, response)

    with SessionContext(
        state.storage,
        clock=clock,
        default_ttl_minutes=config.default_ttl_minutes,
        salt=config.salt,
    ) as context:
        yield context.start(
            caller_id=request.headers.get(CALLER_ID_HEADER),
            tracking_value=tracking_value,
            client_addr=request.client.host if request.client else "",
            user_agent=request.headers.get("user-agent", ""),
        )
