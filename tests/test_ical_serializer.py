"""Unit tests for the iCalendar serializer."""
from datetime import datetime
from zoneinfo import ZoneInfo

from icalendar import Calendar

from feed.ical_serializer import serialize_calendar
from processor.models import EventDraft

NEW_YORK = ZoneInfo('America/New_York')


class TestSerializeCalendar:
    """Test cases for serialize_calendar."""
    
    def test_one_vevent_per_draft(self):
        """Test that every draft becomes a VEVENT with its set properties."""
        drafts = [
            EventDraft(
                summary='Board meeting',
                location='Town Hall',
                description='Hello World',
                start=datetime(2024, 1, 10, 10, tzinfo=NEW_YORK),
                end=datetime(2024, 1, 10, 12, tzinfo=NEW_YORK),
                uid='event-1'
            ),
            EventDraft(
                summary='Picnic',
                start=datetime(2024, 6, 1, 12, tzinfo=NEW_YORK),
                uid='event-2'
            )
        ]
        
        ical = serialize_calendar(drafts, calendar_name='Events')
        
        assert ical.count(b'BEGIN:VEVENT') == 2
        assert b'X-WR-CALNAME:Events' in ical
        assert b'DTSTART;TZID=America/New_York:20240110T100000' in ical
        assert b'DTEND;TZID=America/New_York:20240110T120000' in ical
        assert b'BEGIN:VTIMEZONE' in ical
        
        cal = Calendar.from_ical(ical)
        events = cal.walk('VEVENT')
        assert str(events[0]['SUMMARY']) == 'Board meeting'
        assert str(events[0]['LOCATION']) == 'Town Hall'
        assert str(events[0]['DESCRIPTION']) == 'Hello World'
        assert str(events[0]['UID']) == 'event-1'
        assert 'LOCATION' not in events[1]
        assert 'DESCRIPTION' not in events[1]
        assert 'DTEND' not in events[1]
    
    def test_utc_instants(self):
        drafts = [EventDraft(start=datetime(2024, 1, 10, 10, tzinfo=ZoneInfo('UTC')))]
        
        ical = serialize_calendar(drafts)
        
        assert b'DTSTART:20240110T100000Z' in ical
        assert b'SUMMARY' not in ical
    
    def test_fallback_uid_for_drafts_without_one(self):
        """Test that drafts without uid still get a distinct, stable UID."""
        drafts = [
            EventDraft(summary='Picnic', start=datetime(2024, 6, 1, 12, tzinfo=NEW_YORK)),
            EventDraft(summary='Picnic', start=datetime(2024, 6, 1, 12, tzinfo=NEW_YORK))
        ]
        
        first = Calendar.from_ical(serialize_calendar(drafts)).walk('VEVENT')
        second = Calendar.from_ical(serialize_calendar(drafts)).walk('VEVENT')
        
        uids = [str(event['UID']) for event in first]
        assert all(uids)
        assert uids[0] != uids[1]
        assert uids == [str(event['UID']) for event in second]
    
    def test_empty_feed(self):
        ical = serialize_calendar([])
        
        assert ical.startswith(b'BEGIN:VCALENDAR')
        assert b'BEGIN:VEVENT' not in ical
        assert b'VERSION:2.0' in ical
