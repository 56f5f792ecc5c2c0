"""Feed renderer turning result rows into event drafts."""
import logging
from typing import Any, Dict, List, Optional, Sequence, Union

from processor.date_mappers import RecurringDateMapper, SimpleDateMapper, detect_kind
from processor.models import DateFieldKind, EventDraft, FieldMapping, SourceEntity
from processor.timezone_resolver import resolve_timezone
from recurrence.rrule_helper import RecurrenceHelper
from storage.field_store import FieldStore

logger = logging.getLogger(__name__)


class FeedRenderer:
    """Renders the event drafts of one feed."""
    
    def __init__(
        self,
        field_store: FieldStore,
        recurrence_helper: Optional[RecurrenceHelper] = None
    ):
        """
        Initialize the renderer.
        
        Args:
            field_store: Store providing field values and definitions
            recurrence_helper: Helper expanding recurring dates
        """
        self.field_store = field_store
        self.recurrence_helper = recurrence_helper or RecurrenceHelper()
    
    def render(
        self,
        rows: Sequence[SourceEntity],
        mapping: FieldMapping,
        entity_type: str,
        viewer_timezone: str,
        date_field_settings: Optional[Dict[str, Any]] = None
    ) -> List[EventDraft]:
        """
        Render result rows into event drafts.
        
        The timezone and date field kind are resolved once, before any row
        is read, so configuration errors never leave partial output.
        
        Args:
            rows: Entities of the result rows, in view order
            mapping: Configured field mapping
            entity_type: Entity type listed by the view
            viewer_timezone: Timezone identifier of the requesting user
            date_field_settings: Settings of the date field (timezone_override)
            
        Returns:
            Drafts of all rows, in row order
            
        Raises:
            ConfigurationError: On unknown fields or timezones
            MalformedDateError: On unparseable stored dates
        """
        timezone = resolve_timezone(viewer_timezone, date_field_settings)
        kind = detect_kind(self.field_store, entity_type, mapping.date_field)
        mapper = self._mapper_for(kind)

        drafts = []
        for entity in rows:
            drafts.extend(mapper.map(entity, mapping, timezone))

        logger.info(
            f"Rendered {len(drafts)} events from {len(rows)} rows "
            f"({kind.value} date field '{mapping.date_field}', timezone {timezone.key})"
        )
        return drafts
    
    def _mapper_for(self, kind: DateFieldKind) -> Union[SimpleDateMapper, RecurringDateMapper]:
        if kind is DateFieldKind.RECURRING:
            return RecurringDateMapper(self.field_store, self.recurrence_helper)
        return SimpleDateMapper(self.field_store)
