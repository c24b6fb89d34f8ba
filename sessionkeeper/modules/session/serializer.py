"""
Value and snapshot serialization.

User values are stored as JSON text. Reads never raise: anything that
cannot be decoded behaves like a missing value.
"""

import base64
import binascii
import json
import logging
from typing import Any, Dict, Optional, Tuple

logger = logging.getLogger(__name__)


def serialize(value: Any) -> str:
    """
    Serialize a user value.

    Raises:
        TypeError: value is not JSON serializable
        ValueError: value contains circular references or NaN-like floats
        RecursionError: value is nested too deeply
    """
    return json.dumps(value, allow_nan=False)


def try_deserialize(data: Any) -> Tuple[bool, Any]:
    """
    Deserialize a stored value without ever raising.

    Returns:
        Tuple of (ok, value); value is None when ok is False
    """
    if isinstance(data, (bytes, bytearray)):
        try:
            data = data.decode("utf-8")
        except UnicodeDecodeError:
            return False, None
    if not isinstance(data, str):
        return False, None
    try:
        return True, json.loads(data)
    except (ValueError, RecursionError):
        return False, None


def encode_snapshot(record: Dict[str, Any]) -> str:
    """Encode a full record dict as an opaque, URL-safe snapshot string."""
    payload = json.dumps(record, separators=(",", ":"), sort_keys=True)
    return base64.urlsafe_b64encode(payload.encode("utf-8")).decode("ascii")


def decode_snapshot(snapshot: Any) -> Optional[Dict[str, Any]]:
    """Decode a snapshot string; None when it is malformed."""
    if not isinstance(snapshot, str) or not snapshot:
        return None
    try:
        payload = base64.urlsafe_b64decode(snapshot.encode("ascii"))
        data = json.loads(payload.decode("utf-8"))
    except (binascii.Error, UnicodeError, ValueError, RecursionError) as e:
        logger.debug(f"Rejected malformed snapshot: {e}")
        return None
    if not isinstance(data, dict):
        return None
    return data
