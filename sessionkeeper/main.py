#!/usr/bin/env python3
"""
SessionKeeper - Main Entry Point

This is the thin orchestration layer that:
1. Loads configuration
2. Initializes the storage module
3. Exposes the request-scoped session over HTTP

All business logic is in the modules, following black box principles.
"""

import logging
import time
from contextlib import asynccontextmanager
from typing import Callable, Optional

import redis
import uvicorn
from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.responses import JSONResponse

from sessionkeeper.config.provider import ConfigProvider, EnvConfigProvider
from sessionkeeper.logging_config import configure_logging, get_logging_config
from sessionkeeper.modules.api import (
    DestroyResponse,
    KeyResponse,
    OperationResponse,
    RestoreRequest,
    SessionResponse,
    SetTtlRequest,
    SetValueRequest,
)

# Import modules through their black box interfaces
from sessionkeeper.modules.middleware import TrackingCookie, session_scope
from sessionkeeper.modules.session import InitializationError, Session
from sessionkeeper.modules.storage import StorageBackend, create_storage

logger = logging.getLogger(__name__)


def create_app(
    config_provider: Optional[ConfigProvider] = None,
    storage: Optional[StorageBackend] = None,
    clock: Callable[[], float] = time.time,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        config_provider: Configuration source (environment by default)
        storage: Pre-built storage backend; built from configuration when omitted
        clock: Returns the current epoch time in seconds

    Returns:
        Configured FastAPI app
    """
    config_provider = config_provider or EnvConfigProvider()
    session_config = config_provider.get_session_config()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Manage application lifecycle - attach and release session storage.
        """
        logger.info("Starting SessionKeeper API...")

        # Storage failure here is fatal and aborts startup
        app.state.storage.open()

        logger.info("SessionKeeper API started successfully")

        yield

        logger.info("Shutting down SessionKeeper API...")
        app.state.storage.close()
        logger.info("SessionKeeper API shutdown complete")

    app = FastAPI(
        title="SessionKeeper API",
        description="SessionKeeper - Request-scoped client sessions",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.state.session_config = session_config
    app.state.storage = storage or create_storage(config_provider.get_storage_config())
    app.state.clock = clock
    app.state.tracking_cookie = TrackingCookie(
        name=session_config.cookie_name,
        max_age=session_config.cookie_max_age,
        prefix=session_config.cookie_prefix,
        clock=clock,
    )

    _register_routes(app)
    _register_error_handlers(app)
    return app


def _session_response(session: Session) -> SessionResponse:
    return SessionResponse(
        session_id=session.get_id(),
        started_at=session.get_started_at(),
        ended_at=session.get_ended_at(),
        keys=session.get_all(),
    )


def _register_routes(app: FastAPI) -> None:
    @app.get("/health")
    def health():
        """Health check endpoint."""
        return {"status": "healthy", "version": "1.0.0"}

    # Session Endpoints

    @app.get("/session", response_model=SessionResponse)
    def get_session(session: Session = Depends(session_scope)):
        """
        Get the current session with all its keys.

        Returns:
            200: Session id, timing and keys (empty timing once expired)
            503: Storage unavailable
        """
        return _session_response(session)

    @app.get("/session/keys/{key}", response_model=KeyResponse)
    def get_key(key: str, session: Session = Depends(session_scope)):
        """
        Read one key.

        Returns:
            200: Stored value
            404: Key absent, reserved, or session expired
        """
        if not session.key_exists(key):
            raise HTTPException(404, "Key not found")
        return KeyResponse(key=key, value=session.get(key))

    @app.put("/session/keys/{key}", response_model=OperationResponse)
    def set_key(key: str, payload: SetValueRequest, session: Session = Depends(session_scope)):
        """
        Store one key.

        Returns:
            200: Value stored
            400: Key reserved or session expired
        """
        if not session.set(key, payload.value):
            raise HTTPException(400, f"Cannot store key {key}")
        return OperationResponse(ok=True, key=key)

    @app.delete("/session/keys/{key}", response_model=OperationResponse)
    def delete_key(key: str, session: Session = Depends(session_scope)):
        """
        Delete one key. Deleting an absent key succeeds.

        Returns:
            200: Key gone
            400: Key reserved or session expired
        """
        if not session.destroy_key(key):
            raise HTTPException(400, f"Cannot delete key {key}")
        return OperationResponse(ok=True, key=key)

    @app.delete("/session/keys", response_model=OperationResponse)
    def delete_all_keys(session: Session = Depends(session_scope)):
        """Delete every key of the session."""
        return OperationResponse(ok=session.destroy_all_keys())

    @app.put("/session/ttl", response_model=SessionResponse)
    def set_ttl(payload: SetTtlRequest, session: Session = Depends(session_scope)):
        """Change the session duration, optionally restarting the window."""
        session.set_ttl(payload.minutes)
        if payload.restart:
            session.restart_timing()
        return _session_response(session)

    @app.post("/session/destroy", response_model=DestroyResponse)
    def destroy_session(
        export: bool = Query(False, description="Return a snapshot of the session"),
        session: Session = Depends(session_scope),
    ):
        """
        Destroy the session.

        The snapshot can be handed to POST /session/restore later, for
        example after the caller id changed.
        """
        result = session.destroy(export_snapshot=export)
        return DestroyResponse(
            destroyed=result is not False,
            snapshot=result if isinstance(result, str) else None,
        )

    @app.post("/session/restore", response_model=SessionResponse)
    def restore_session(payload: RestoreRequest, session: Session = Depends(session_scope)):
        """
        Replace the session contents with a snapshot.

        Returns:
            200: Restored session
            400: Malformed snapshot or session expired
        """
        if not session.restore(payload.snapshot):
            raise HTTPException(400, "Invalid session snapshot")
        return _session_response(session)


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(InitializationError)
    async def initialization_error_handler(request, exc):
        """Handle storage attach failures."""
        logger.error(f"Session initialization failed: {exc}")
        return JSONResponse(status_code=503, content={"error": str(exc)})

    @app.exception_handler(redis.ConnectionError)
    async def redis_error_handler(request, exc):
        """Handle Redis connection errors."""
        logger.error(f"Redis connection error: {exc}")
        return JSONResponse(status_code=503, content={"error": "Session storage connection failed"})


# Get configuration
config_provider: ConfigProvider = EnvConfigProvider()
api_config = config_provider.get_api_config()

configure_logging(api_config.log_level)

app = create_app(config_provider)


def run() -> None:
    """Run the API server."""
    # Use dict config for logging, not file path
    uvicorn.run(
        "sessionkeeper.main:app",
        host=api_config.host,
        port=api_config.port,
        log_level=api_config.log_level.lower(),
        reload=api_config.debug,
        log_config=get_logging_config(api_config.log_level),
    )


if __name__ == "__main__":
    run()
