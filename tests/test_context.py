import json
from unittest.mock import MagicMock

import pytest

from sessionkeeper.modules.identity import derive_id
from sessionkeeper.modules.session import InitializationError, SessionContext, SessionState
from sessionkeeper.modules.storage import FileStorage

SIGNALS = {
    "tracking_value": "S3ss10n/1704067200",
    "client_addr": "10.0.0.1",
    "user_agent": "pytest-agent",
}


def test_start_derives_id_from_signals(context):
    session = context.start(caller_id="u1", **SIGNALS)
    assert session.get_id() == derive_id("u1", **SIGNALS)
    assert session.state is SessionState.ACTIVE


def test_start_is_get_or_create(context):
    """Test only one session is active per context."""
    first = context.start(caller_id="u1", **SIGNALS)
    second = context.start(caller_id="someone-else", **SIGNALS)

    assert second is first
    assert context.current is first


def test_start_uses_context_salt(file_storage, clock):
    context = SessionContext(file_storage, clock=clock, salt="pepper")
    session = context.start(caller_id="u1", **SIGNALS)
    assert session.get_id() == derive_id("u1", salt="pepper", **SIGNALS)


def test_start_applies_default_ttl(file_storage, clock):
    context = SessionContext(file_storage, clock=clock, default_ttl_minutes=15)
    session = context.start(**SIGNALS)
    assert session.record.ttl_minutes == 15


def test_destroy_detaches_from_context(context):
    session = context.start(caller_id="u1", **SIGNALS)
    session.destroy()

    assert context.current is None
    assert context.start(caller_id="u1", **SIGNALS) is not session


def test_expired_session_scenario(context, clock):
    """Test open -> set -> expire -> reopen gives a fresh record."""
    session = context.start(caller_id="u1", ttl_minutes=1, **SIGNALS)
    first_started = session.get_started_at()
    assert session.set("cart", "[]") is True

    clock.advance(61)

    assert session.get("cart") is None
    assert context.current is None

    reopened = context.start(caller_id="u1", **SIGNALS)
    assert reopened.get_id() == session.get_id()
    assert reopened.get("cart") is None
    assert reopened.get_started_at() != first_started


def test_teardown_flushes_and_detaches(context, file_storage):
    session = context.start(caller_id="u1", **SIGNALS)
    session.set("user", "alice")

    context.teardown()

    assert context.current is None
    stored = json.loads(file_storage.read(session.get_id()))
    assert stored["entries"] == {"user": '"alice"'}


def test_teardown_without_session_is_noop(context):
    context.teardown()
    assert context.current is None


def test_next_request_sees_previous_values(file_storage, clock):
    with SessionContext(file_storage, clock=clock) as first_request:
        first_request.start(caller_id="u1", **SIGNALS).set("cart", [1, 2])

    with SessionContext(file_storage, clock=clock) as second_request:
        assert second_request.start(caller_id="u1", **SIGNALS).get("cart") == [1, 2]


def test_context_manager_flushes_on_error(file_storage, clock):
    """Test teardown runs on the error path."""
    with pytest.raises(RuntimeError):
        with SessionContext(file_storage, clock=clock) as context:
            session = context.start(**SIGNALS)
            session.set("draft", "unsaved")
            raise RuntimeError("handler failed")

    stored = json.loads(file_storage.read(session.get_id()))
    assert stored["entries"]["draft"] == '"unsaved"'


def test_teardown_releases_when_flush_fails(context, file_storage):
    context.start(**SIGNALS)
    file_storage.write = MagicMock(side_effect=OSError("disk full"))

    with pytest.raises(OSError):
        context.teardown()

    assert context.current is None


def test_start_propagates_initialization_error(tmp_path, clock):
    blocker = tmp_path / "blocker"
    blocker.write_text("x")
    context = SessionContext(FileStorage(blocker / "sessions"), clock=clock)

    with pytest.raises(InitializationError):
        context.start(**SIGNALS)

    assert context.current is None
