"""Builds calendar event drafts from entity field values."""
from typing import Optional

from bs4 import BeautifulSoup

from processor.models import EventDraft, FieldMapping, SourceEntity
from storage.field_store import FieldStore


def build_default_draft(
    entity: SourceEntity,
    mapping: FieldMapping,
    field_store: Optional[FieldStore] = None
) -> EventDraft:
    """
    Create an event draft holding the entity's summary, location and description.
    
    Unmapped fields and fields without a value leave the property unset.
    
    Args:
        entity: Entity of the result row
        mapping: Configured field mapping
        field_store: Store used to read field values; values are read
            straight from the entity when omitted
        
    Returns:
        EventDraft without dates
    """
    field_store = field_store or FieldStore({})
    summary = _first_value(entity, mapping.summary_field, field_store)
    location = _first_value(entity, mapping.location_field, field_store)

    description = _first_value(entity, mapping.description_field, field_store)
    if description is not None:
        description = strip_tags(description) or None

    return EventDraft(
        summary=summary,
        location=location,
        description=description,
        use_timezone=True
    )


def strip_tags(markup: str) -> str:
    """Remove markup tags, keeping the text content."""
    return BeautifulSoup(markup, 'html.parser').get_text()


def _first_value(
    entity: SourceEntity,
    field_id: Optional[str],
    field_store: FieldStore
) -> Optional[str]:
    if not field_id:
        return None

    items = field_store.get_field_values(entity, field_id)
    if not items:
        return None

    value = items[0].get('value')
    if value is None or value == '':
        return None
    return str(value)
