"""Recurrence helper expanding stored recurrence rules into occurrences."""
import logging
from datetime import datetime, timedelta, tzinfo
from itertools import islice
from typing import Any, Dict, List, Tuple

from dateutil import parser
from dateutil.rrule import rrulestr

from processor.date_utils import parse_stored_datetime
from processor.errors import ConfigurationError, MalformedDateError
from processor.models import Occurrence
from processor.timezone_resolver import load_timezone

logger = logging.getLogger(__name__)


class RecurrenceHelper:
    """Expands recurring date field items with python-dateutil."""
    
    DEFAULT_MAX_OCCURRENCES = 100
    
    def __init__(self, max_occurrences: int = DEFAULT_MAX_OCCURRENCES):
        """
        Initialize the helper.
        
        Args:
            max_occurrences: Upper bound of occurrences per item, which
                also limits rules without COUNT or UNTIL
        """
        if max_occurrences < 1:
            raise ConfigurationError(
                f"max_occurrences must be positive, got {max_occurrences}"
            )
        self.max_occurrences = max_occurrences
    
    def expand(self, item: Dict[str, Any]) -> List[Occurrence]:
        """
        Expand one recurring date item.
        
        The item holds 'value' and 'end_value' (first occurrence, stored in
        UTC), 'rrule' (RFC 5545 text, may include EXDATE lines) and
        'timezone' (the zone the rule repeats in). EXDATE values without a
        timezone or TZID are local times of the item timezone.
        
        Args:
            item: Stored field item
            
        Returns:
            Occurrences in chronological order, at most max_occurrences
            
        Raises:
            MalformedDateError: If a date, timezone or the rule cannot be parsed
        """
        item_timezone = _stored_timezone(item.get('timezone') or 'UTC')
        start = parse_stored_datetime(item.get('value')).astimezone(item_timezone)

        if item.get('end_value'):
            end = parse_stored_datetime(item['end_value']).astimezone(item_timezone)
        else:
            end = start
        duration = end - start
        if duration < timedelta(0):
            raise MalformedDateError(
                f"Recurring date ends before it starts: {item.get('value')} - {item.get('end_value')}"
            )

        rule_text = (item.get('rrule') or '').strip()
        if not rule_text:
            # No rule: the item is a single occurrence
            return [Occurrence(start=start, end=end)]

        try:
            rule_text, exdates = _split_exdates(rule_text, item_timezone)
            rule = rrulestr(rule_text, dtstart=start, forceset=True)
            for exdate in exdates:
                rule.exdate(exdate)
            starts = list(islice(rule, self.max_occurrences))
        except (ValueError, TypeError, OverflowError) as e:
            raise MalformedDateError(f"Invalid recurrence rule '{rule_text}': {e}") from e

        if len(starts) == self.max_occurrences:
            logger.debug(
                f"Recurrence '{rule_text}' truncated at {self.max_occurrences} occurrences"
            )

        # Occurrences are generated as wall-clock times in the item timezone
        return [
            Occurrence(start=occurrence_start, end=occurrence_start + duration)
            for occurrence_start in starts
        ]


def _stored_timezone(name: str) -> tzinfo:
    """Load a timezone named by stored data."""
    try:
        return load_timezone(name)
    except ConfigurationError as e:
        raise MalformedDateError(f"Invalid stored timezone '{name}': {e}") from e


def _split_exdates(rule_text: str, item_timezone: tzinfo) -> Tuple[str, List[datetime]]:
    """
    Take the EXDATE lines out of a rule, returning the rest and aware exclusions.
    
    Floating values get the TZID of the line, else the item timezone.
    """
    rule_lines = []
    exdates = []

    for line in rule_text.splitlines():
        name, _, value = line.strip().partition(':')
        if not value or not name.upper().startswith('EXDATE'):
            rule_lines.append(line)
            continue

        params = dict(
            param.split('=', 1) for param in name.split(';')[1:] if '=' in param
        )
        params = {key.upper(): param_value for key, param_value in params.items()}
        line_timezone = item_timezone
        if params.get('TZID'):
            line_timezone = _stored_timezone(params['TZID'])

        for text in value.split(','):
            exdate = parser.parse(text.strip())
            if exdate.tzinfo is None:
                exdate = exdate.replace(tzinfo=line_timezone)
            exdates.append(exdate)

    return '\n'.join(rule_lines), exdates
