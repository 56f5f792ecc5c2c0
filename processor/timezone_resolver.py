"""Resolves the timezone all instants of a feed are expressed in."""
import logging
from typing import Any, Dict, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from processor.errors import ConfigurationError

logger = logging.getLogger(__name__)


def resolve_timezone(
    viewer_default: str,
    date_field_settings: Optional[Dict[str, Any]] = None
) -> ZoneInfo:
    """
    Pick the feed timezone.
    
    The viewer's timezone is used unless the date field configures a
    non-empty timezone override.
    
    Args:
        viewer_default: Timezone identifier of the requesting user
        date_field_settings: Settings of the configured date field
        
    Returns:
        ZoneInfo shared by every event of the feed
        
    Raises:
        ConfigurationError: If the chosen identifier is not a known timezone
    """
    override = (date_field_settings or {}).get('timezone_override')
    name = override if override else viewer_default

    if override:
        logger.debug(f"Using date field timezone override: {override}")

    return load_timezone(name)


def load_timezone(name: str) -> ZoneInfo:
    """Load a timezone by IANA identifier, raising ConfigurationError if unknown."""
    if not name:
        raise ConfigurationError("Empty timezone identifier")
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, OSError) as e:
        raise ConfigurationError(f"Invalid timezone identifier '{name}': {e}") from e
