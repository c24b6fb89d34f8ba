"""
SessionKeeper - Request-Scoped Session Manager

Derives a stable per-client session identifier from request signals and
binds it to a server-side key/value record with a fixed expiration window.

Architecture:
- Each module is self-contained with clear interfaces
- Modules are completely replaceable
- No module knows the internals of another
- All communication through defined interfaces

Modules:
- identity: Fingerprint building and session id derivation
- session: Session record, lifecycle state machine and serialization
- storage: Data persistence abstraction (directory or Redis)
- middleware: Tracking cookie and request-scoped session dependency
- api: REST API models
"""

__version__ = "1.0.0"
