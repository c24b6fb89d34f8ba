"""Session module errors."""


class InitializationError(Exception):
    """Raised when the storage medium cannot be attached to a session."""
