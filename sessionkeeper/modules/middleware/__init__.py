"""
Session Middleware Module - Black Box Interface

Purpose: Bind client sessions to the lifetime of an HTTP request
Interface: TrackingCookie, session_scope() FastAPI dependency
Hidden: Cookie minting, request signal extraction, teardown

The session core never reads request state itself; this module collects
the signals and hands them over explicitly.
"""

from .tracking import CALLER_ID_HEADER, LOCAL_TRACKING_VALUE, TrackingCookie, session_scope

__all__ = ["CALLER_ID_HEADER", "LOCAL_TRACKING_VALUE", "TrackingCookie", "session_scope"]
