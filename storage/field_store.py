"""Field store exposing entity field values and field definitions."""
import logging
from typing import Any, Dict, List

from processor.errors import ConfigurationError
from processor.models import FieldSchema, SourceEntity

logger = logging.getLogger(__name__)

RECURRING_FIELD_TYPES = frozenset({'date_recur'})


class FieldStore:
    """Read-only access to entity fields and their storage definitions."""
    
    def __init__(self, schemas: Dict[str, Dict[str, FieldSchema]]):
        """
        Initialize the field store.
        
        Args:
            schemas: Field definitions keyed by entity type, then field id
        """
        self.schemas = schemas
    
    @classmethod
    def from_field_types(
        cls,
        entity_type: str,
        field_types: Dict[str, str],
        **kwargs: Any
    ) -> 'FieldStore':
        """
        Build a store for one entity type from a field id -> type mapping.
        
        Fields of a recurring type (date_recur) are flagged as recurring.
        """
        schema = {
            field_id: FieldSchema(
                field_id=field_id,
                type=field_type,
                recurring=field_type in RECURRING_FIELD_TYPES
            )
            for field_id, field_type in field_types.items()
        }
        return cls(schemas={entity_type: schema}, **kwargs)
    
    def get_field_values(self, entity: SourceEntity, field_id: str) -> List[Dict[str, Any]]:
        """Return the stored items of a field, in storage order."""
        return list(entity.fields.get(field_id) or [])
    
    def get_field_schema(self, entity_type: str, field_id: str) -> FieldSchema:
        """
        Look up the storage definition of a field.
        
        Args:
            entity_type: Entity type owning the field
            field_id: Field identifier
            
        Returns:
            FieldSchema of the field
            
        Raises:
            ConfigurationError: If the field is not defined for the entity type
        """
        try:
            return self.schemas[entity_type][field_id]
        except KeyError:
            logger.error(f"Field '{field_id}' is not defined on entity type '{entity_type}'")
            raise ConfigurationError(
                f"Unknown field '{field_id}' for entity type '{entity_type}'"
            ) from None
