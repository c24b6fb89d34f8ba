"""
SessionKeeper API data models.

These models define the request and response bodies of the session
endpoints.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator

# Request Models (API Input)


class SetValueRequest(BaseModel):
    """Request to store a value under a session key."""

    value: Any = Field(None, description="Any JSON value")


class SetTtlRequest(BaseModel):
    """Request to change the session duration."""

    minutes: int = Field(..., description="Duration in minutes; 0 or less means unbounded")
    restart: bool = Field(False, description="Restart the expiration window from now")


class RestoreRequest(BaseModel):
    """Request to restore a previously exported snapshot."""

    snapshot: str = Field(..., min_length=1, description="Snapshot returned by destroy")

    @field_validator("snapshot")
    @classmethod
    def strip_snapshot(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("snapshot must not be blank")
        return v


# Response Models (API Output)


class SessionResponse(BaseModel):
    """Current session state."""

    session_id: str
    started_at: str
    ended_at: str
    keys: Dict[str, Any] = Field(default_factory=dict)


class KeyResponse(BaseModel):
    """Value stored under a key."""

    key: str
    value: Any = None


class OperationResponse(BaseModel):
    """Result of a mutating operation."""

    ok: bool
    key: Optional[str] = None


class DestroyResponse(BaseModel):
    """Result of destroying the session."""

    destroyed: bool
    snapshot: Optional[str] = None
