"""Small helpers shared by the stores."""

import json
import math
import time
from datetime import UTC, datetime
from typing import Any, TypeVar

T = TypeVar("T")

# Largest value SQLite can hold in an INTEGER column
MAX_SQLITE_INT = 2**63 - 1


def safe_json_loads(value: Any, fallback: T) -> Any | T:
    """Parse JSON without ever raising.

    Use this instead of ``json.loads`` for data read back from the database
    or from tables written by other tools.

    Args:
        value: JSON text to parse
        fallback: Returned for non-string, empty or malformed input

    Returns:
        Parsed value or fallback
    """
    if not isinstance(value, str) or value == "":
        return fallback
    try:
        return json.loads(value)
    except ValueError:
        return fallback


def compact_json(value: Any) -> str:
    """Serialize to JSON without insignificant whitespace."""
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def estimate_tokens(text: str, chars_per_token: int = 4) -> int:
    """Estimate token count for a piece of text.

    Uses a simple heuristic: ~4 characters per token, rounded up so that any
    non-empty text costs at least one token.

    Args:
        text: Text to estimate
        chars_per_token: Characters assumed per token

    Returns:
        Estimated token count
    """
    return math.ceil(len(text) / chars_per_token)


def now_ms() -> int:
    """Current time as integer epoch milliseconds."""
    return time.time_ns() // 1_000_000


def ms_to_datetime(value: int | None) -> datetime | None:
    """Convert stored epoch milliseconds to an aware UTC datetime."""
    if value is None:
        return None
    try:
        return datetime.fromtimestamp(value / 1000, tz=UTC)
    except (OverflowError, OSError, ValueError):
        limit = datetime.min if value < 0 else datetime.max
        return limit.replace(tzinfo=UTC)


def expiry_from_ttl(ttl: float | None, now: int) -> int | None:
    """Compute the stored expiry for a TTL in seconds.

    ``None`` and ``0`` both mean the item never expires. Negative values give
    an expiry in the past, so the item is hidden from the moment it is written.

    Args:
        ttl: Seconds until expiry
        now: Write time in epoch milliseconds

    Returns:
        Expiry in epoch milliseconds, or None for no expiry
    """
    if ttl is None or ttl == 0:
        return None
    ttl = max(min(ttl, MAX_SQLITE_INT / 1000), -MAX_SQLITE_INT / 1000)
    expires_at = now + math.floor(ttl * 1000)
    if ttl < 0:
        # Guarantee the expiry lands strictly before "now" even for tiny values
        expires_at = min(expires_at, now - 1)
    return max(min(expires_at, MAX_SQLITE_INT), -MAX_SQLITE_INT)
