"""
API Module - Black Box Interface

Purpose: HTTP request and response models
Interface: Pydantic models used by the REST endpoints
Hidden: Validation rules

The API module only describes payloads - it contains no business logic.
All logic is delegated to the session module.
"""

from .models import (
    DestroyResponse,
    KeyResponse,
    OperationResponse,
    RestoreRequest,
    SessionResponse,
    SetTtlRequest,
    SetValueRequest,
)

__all__ = [
    "DestroyResponse",
    "KeyResponse",
    "OperationResponse",
    "RestoreRequest",
    "SessionResponse",
    "SetTtlRequest",
    "SetValueRequest",
]
