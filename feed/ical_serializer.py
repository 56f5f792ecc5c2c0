"""Serializes event drafts into iCalendar text."""
import logging
from datetime import datetime, timezone
from typing import Iterable, Optional

from icalendar import Calendar, Event

from processor.date_utils import generate_event_id
from processor.models import EventDraft

logger = logging.getLogger(__name__)

DEFAULT_PRODID = '-//Views iCal//Feed//EN'


def serialize_calendar(
    drafts: Iterable[EventDraft],
    calendar_name: Optional[str] = None,
    prodid: str = DEFAULT_PRODID
) -> bytes:
    """
    Build an iCalendar document with one VEVENT per draft.
    
    Args:
        drafts: Event drafts of the feed
        calendar_name: Optional X-WR-CALNAME
        prodid: PRODID of the calendar
        
    Returns:
        iCalendar document as bytes
    """
    cal = Calendar()
    cal.add('prodid', prodid)
    cal.add('version', '2.0')
    if calendar_name:
        cal.add('x-wr-calname', calendar_name)

    stamp = datetime.now(tz=timezone.utc)
    count = 0
    for position, draft in enumerate(drafts):
        cal.add_component(_draft_to_event(draft, stamp, position))
        count += 1

    # VTIMEZONE components for every TZID used by the events
    cal.add_missing_timezones()

    logger.info(f"Serialized {count} events to iCalendar")
    return cal.to_ical()


def _draft_to_event(draft: EventDraft, stamp: datetime, position: int) -> Event:
    event = Event()
    # Every VEVENT needs a UID
    event.add('uid', draft.uid or _fallback_uid(draft, position))
    event.add('dtstamp', stamp)

    if draft.summary is not None:
        event.add('summary', draft.summary)
    if draft.location is not None:
        event.add('location', draft.location)
    if draft.description is not None:
        event.add('description', draft.description)

    start = draft.start
    end = draft.end
    if not draft.use_timezone:
        start = start.astimezone(timezone.utc) if start else None
        end = end.astimezone(timezone.utc) if end else None

    if start is not None:
        event.add('dtstart', start)
    if end is not None:
        event.add('dtend', end)
    return event


def _fallback_uid(draft: EventDraft, position: int) -> str:
    """Stable UID from the draft's content and its position in the feed."""
    return generate_event_id(
        position,
        draft.summary,
        draft.start.isoformat() if draft.start else None,
        draft.end.isoformat() if draft.end else None
    )
