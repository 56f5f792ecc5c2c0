"""Helpers for stored date values."""
import hashlib
from datetime import datetime, timezone
from typing import Any

from dateutil import parser

from processor.errors import MalformedDateError


def parse_stored_datetime(value: Any) -> datetime:
    """
    Parse a stored date value as an aware datetime.
    
    Values are persisted in UTC, so naive values are taken as UTC. A
    date-only value means midnight UTC.
    
    Args:
        value: Stored ISO 8601 text
        
    Returns:
        Timezone-aware datetime
        
    Raises:
        MalformedDateError: If the value is not a valid ISO 8601 date/time
    """
    if not isinstance(value, str) or not value.strip():
        raise MalformedDateError(f"Missing or non-text date value: {value!r}")

    try:
        parsed = parser.isoparse(value.strip())
    except (ValueError, OverflowError) as e:
        raise MalformedDateError(f"Invalid stored date value '{value}': {e}") from e

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def generate_event_id(*parts: Any) -> str:
    """
    Generate a stable event identifier from the given parts.
    
    Returns:
        SHA256 hex digest of the parts joined by '|'
    """
    composite = '|'.join(str(part) for part in parts)
    return hashlib.sha256(composite.encode('utf-8')).hexdigest()
