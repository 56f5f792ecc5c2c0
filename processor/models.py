"""Data models for iCal feed rendering."""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from processor.errors import ConfigurationError

MAPPING_OPTIONS = ('date_field', 'summary_field', 'location_field', 'description_field')


@dataclass(frozen=True)
class FieldMapping:
    """Which entity fields feed which calendar properties."""
    date_field: str
    summary_field: Optional[str] = None
    location_field: Optional[str] = None
    description_field: Optional[str] = None

    @classmethod
    def from_options(cls, options: Dict[str, Any]) -> 'FieldMapping':
        """
        Build a mapping from style plugin options.
        
        Args:
            options: Options dict holding the four field options
            
        Returns:
            FieldMapping instance
            
        Raises:
            ConfigurationError: If no date field is configured
        """
        date_field = options.get('date_field')
        if not date_field:
            raise ConfigurationError("No date field configured for the iCal feed")

        return cls(
            date_field=date_field,
            summary_field=options.get('summary_field') or None,
            location_field=options.get('location_field') or None,
            description_field=options.get('description_field') or None
        )


@dataclass
class SourceEntity:
    """Entity behind one result row; fields map to ordered item dicts."""
    entity_type: str
    entity_id: str
    fields: Dict[str, List[Dict[str, Any]]] = field(default_factory=dict)


class DateFieldKind(Enum):
    """How a date field stores its dates."""
    SIMPLE = 'simple'
    RECURRING = 'recurring'


@dataclass(frozen=True)
class FieldSchema:
    """Declared storage definition of an entity field."""
    field_id: str
    type: str
    recurring: bool = False


@dataclass(frozen=True)
class Occurrence:
    """One concrete start/end pair of an expanded recurrence rule."""
    start: datetime
    end: datetime


@dataclass(frozen=True)
class EventDraft:
    """Calendar event ready to be handed to the serializer."""
    summary: Optional[str] = None
    location: Optional[str] = None
    description: Optional[str] = None
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    use_timezone: bool = True
    uid: Optional[str] = None


@dataclass
class ViewResult:
    """Executed view as handed to the style plugin."""
    rows: List[SourceEntity]
    entity_type: str
    row_plugin: Optional[str] = 'fields'
    date_field_settings: Dict[str, Any] = field(default_factory=dict)
