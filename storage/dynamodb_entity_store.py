"""DynamoDB-backed source of view result rows."""
import logging
import re
from decimal import Decimal
from typing import Any, Dict, List, Tuple, Union

import boto3
from boto3.dynamodb.conditions import Attr
from botocore.exceptions import ClientError

from processor.models import FieldSchema, SourceEntity
from storage.field_store import FieldStore

logger = logging.getLogger(__name__)


class DynamoDBEntityStore(FieldStore):
    """Field store whose entities live in a DynamoDB table."""
    
    def __init__(
        self,
        table_name: str,
        schemas: Dict[str, Dict[str, FieldSchema]],
        sort_attribute: str = 'entity_id'
    ):
        """
        Initialize DynamoDB table reference.
        
        Args:
            table_name: Name of the DynamoDB table
            schemas: Field definitions keyed by entity type, then field id
            sort_attribute: Item attribute the rows are ordered by
        """
        super().__init__(schemas)
        self.table_name = table_name
        self.sort_attribute = sort_attribute
        self.dynamodb = boto3.resource('dynamodb')
        self.table = self.dynamodb.Table(table_name)
        logger.info(f"Initialized DynamoDBEntityStore for table: {table_name}")
    
    def load_rows(self, entity_type: str) -> List[SourceEntity]:
        """
        Load every entity of a type using a Scan operation.
        
        Args:
            entity_type: Entity type to list
            
        Returns:
            Entities ordered by the sort attribute
        """
        logger.info(f"Scanning DynamoDB table for '{entity_type}' entities")
        
        try:
            scan_kwargs = {'FilterExpression': Attr('entity_type').eq(entity_type)}
            response = self.table.scan(**scan_kwargs)
            items = response.get('Items', [])
            
            # Handle pagination
            while 'LastEvaluatedKey' in response:
                response = self.table.scan(
                    ExclusiveStartKey=response['LastEvaluatedKey'],
                    **scan_kwargs
                )
                items.extend(response.get('Items', []))
        
        except ClientError as e:
            logger.error(f"Error scanning DynamoDB table: {e}")
            raise
        
        items.sort(key=lambda item: natural_sort_key(item.get(self.sort_attribute, '')))
        rows = [self._item_to_entity(item) for item in items]
        
        logger.info(f"Retrieved {len(rows)} entities from DynamoDB")
        return rows
    
    def _item_to_entity(self, item: Dict[str, Any]) -> SourceEntity:
        """
        Convert DynamoDB item to SourceEntity object.
        
        Args:
            item: DynamoDB item dictionary
            
        Returns:
            SourceEntity object
        """
        fields = {}
        for field_id, values in (item.get('fields') or {}).items():
            if isinstance(values, dict):
                values = [values]
            fields[field_id] = [
                {key: _plain_value(value) for key, value in field_item.items()}
                for field_item in values
            ]
        
        return SourceEntity(
            entity_type=item['entity_type'],
            entity_id=str(item['entity_id']),
            fields=fields
        )


def _plain_value(value: Any) -> Any:
    # DynamoDB returns numbers as Decimal
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    return value


def natural_sort_key(value: Any) -> Tuple[Union[str, int], ...]:
    """Sort key ordering embedded numbers by value, so node-2 sorts before node-10."""
    return tuple(
        int(part) if index % 2 else part
        for index, part in enumerate(re.split(r'(\d+)', str(value)))
    )
