"""Mappers turning an entity's date field into event drafts."""
import dataclasses
import logging
from datetime import tzinfo
from typing import List

from processor.date_utils import generate_event_id, parse_stored_datetime
from processor.errors import ConfigurationError
from processor.event_builder import build_default_draft
from processor.models import DateFieldKind, EventDraft, FieldMapping, SourceEntity
from recurrence.rrule_helper import RecurrenceHelper
from storage.field_store import FieldStore

logger = logging.getLogger(__name__)


def detect_kind(field_store: FieldStore, entity_type: str, date_field: str) -> DateFieldKind:
    """
    Decide whether the configured date field holds recurrence rules.
    
    Args:
        field_store: Store holding the field definitions
        entity_type: Entity type listed by the view
        date_field: Configured date field id
        
    Returns:
        DateFieldKind.RECURRING for recurrence-capable fields, else SIMPLE
        
    Raises:
        ConfigurationError: If the date field is not defined
    """
    if not date_field:
        raise ConfigurationError("No date field configured for the iCal feed")

    schema = field_store.get_field_schema(entity_type, date_field)
    if schema.recurring:
        return DateFieldKind.RECURRING
    return DateFieldKind.SIMPLE


class SimpleDateMapper:
    """Maps each stored date or date range to one event draft."""
    
    def __init__(self, field_store: FieldStore):
        self.field_store = field_store
    
    def map(
        self,
        entity: SourceEntity,
        mapping: FieldMapping,
        timezone: tzinfo
    ) -> List[EventDraft]:
        """
        Create one draft per date item, in storage order.
        
        Args:
            entity: Entity of the result row
            mapping: Configured field mapping
            timezone: Resolved feed timezone
            
        Returns:
            New list of EventDraft objects
            
        Raises:
            MalformedDateError: If a stored date cannot be parsed
        """
        drafts = []

        for delta, item in enumerate(self.field_store.get_field_values(entity, mapping.date_field)):
            draft = build_default_draft(entity, mapping, self.field_store)

            start = parse_stored_datetime(item.get('value')).astimezone(timezone)
            end = None
            if item.get('end_value'):
                end = parse_stored_datetime(item['end_value']).astimezone(timezone)

            drafts.append(dataclasses.replace(
                draft,
                start=start,
                end=end,
                uid=generate_event_id(entity.entity_type, entity.entity_id, delta, start.isoformat())
            ))

        return drafts


class RecurringDateMapper:
    """Maps every occurrence of each stored recurrence to an event draft."""
    
    def __init__(self, field_store: FieldStore, recurrence_helper: RecurrenceHelper):
        self.field_store = field_store
        self.recurrence_helper = recurrence_helper
    
    def map(
        self,
        entity: SourceEntity,
        mapping: FieldMapping,
        timezone: tzinfo
    ) -> List[EventDraft]:
        """
        Create one draft per occurrence.
        
        Items are processed in field order and occurrences in the order the
        helper yields them; drafts of different items are not merged into a
        single chronological order.
        
        Args:
            entity: Entity of the result row
            mapping: Configured field mapping
            timezone: Resolved feed timezone
            
        Returns:
            New list of EventDraft objects, each with start and end set
        """
        drafts = []

        for delta, item in enumerate(self.field_store.get_field_values(entity, mapping.date_field)):
            occurrences = self.recurrence_helper.expand(item)

            for index, occurrence in enumerate(occurrences):
                draft = build_default_draft(entity, mapping, self.field_store)
                start = occurrence.start.astimezone(timezone)
                end = occurrence.end.astimezone(timezone)

                drafts.append(dataclasses.replace(
                    draft,
                    start=start,
                    end=end,
                    uid=generate_event_id(
                        entity.entity_type, entity.entity_id, delta, index, start.isoformat()
                    )
                ))

        return drafts
