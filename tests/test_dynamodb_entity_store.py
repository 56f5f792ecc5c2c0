"""Unit tests for the DynamoDB entity store."""
import boto3
import pytest
from moto import mock_aws

from processor.errors import ConfigurationError
from storage.dynamodb_entity_store import DynamoDBEntityStore, natural_sort_key

TABLE_NAME = 'test-views-ical-entities'


@pytest.fixture
def dynamodb_table(monkeypatch):
    """Create a mock DynamoDB table for testing."""
    monkeypatch.setenv('AWS_DEFAULT_REGION', 'us-east-1')
    with mock_aws():
        dynamodb = boto3.resource('dynamodb', region_name='us-east-1')
        
        table = dynamodb.create_table(
            TableName=TABLE_NAME,
            KeySchema=[
                {'AttributeName': 'entity_id', 'KeyType': 'HASH'}
            ],
            AttributeDefinitions=[
                {'AttributeName': 'entity_id', 'AttributeType': 'S'}
            ],
            BillingMode='PAY_PER_REQUEST'
        )
        
        yield table


@pytest.fixture
def entity_store(dynamodb_table):
    """Create DynamoDBEntityStore instance with mock table."""
    return DynamoDBEntityStore.from_field_types(
        'node',
        {'field_when': 'daterange', 'title': 'string'},
        table_name=TABLE_NAME
    )


def test_load_rows_empty_table(entity_store):
    """Test load_rows returns no rows for an empty table."""
    assert entity_store.load_rows('node') == []


def test_load_rows_converts_items(dynamodb_table, entity_store):
    """Test that items become entities with their field items."""
    dynamodb_table.put_item(Item={
        'entity_id': 'node-1',
        'entity_type': 'node',
        'fields': {
            'title': [{'value': 'Board meeting'}],
            'field_when': [
                {'value': '2024-01-10T15:00:00', 'end_value': '2024-01-10T16:00:00'},
                {'value': '2024-01-17T15:00:00', 'end_value': ''}
            ],
            'field_weight': {'value': 3}
        }
    })
    
    rows = entity_store.load_rows('node')
    
    assert len(rows) == 1
    entity = rows[0]
    assert entity.entity_id == 'node-1'
    assert entity.entity_type == 'node'
    assert entity_store.get_field_values(entity, 'title') == [{'value': 'Board meeting'}]
    assert entity_store.get_field_values(entity, 'field_when')[1] == {
        'value': '2024-01-17T15:00:00',
        'end_value': ''
    }
    assert entity.fields['field_weight'] == [{'value': 3}]
    assert entity_store.get_field_values(entity, 'field_missing') == []


def test_load_rows_filters_and_sorts(dynamodb_table, entity_store):
    """Test that only the requested entity type is returned, sorted by id."""
    for entity_id, entity_type in [('node-3', 'node'), ('user-1', 'user'), ('node-1', 'node')]:
        dynamodb_table.put_item(Item={
            'entity_id': entity_id,
            'entity_type': entity_type,
            'fields': {}
        })
    
    rows = entity_store.load_rows('node')
    
    assert [row.entity_id for row in rows] == ['node-1', 'node-3']


def test_load_rows_orders_numbers_by_value(dynamodb_table, entity_store):
    """Test that numeric parts of ids sort by value, not character by character."""
    for entity_id in ['node-10', 'node-2', 'node-1']:
        dynamodb_table.put_item(Item={
            'entity_id': entity_id,
            'entity_type': 'node',
            'fields': {}
        })
    
    rows = entity_store.load_rows('node')
    
    assert [row.entity_id for row in rows] == ['node-1', 'node-2', 'node-10']


def test_natural_sort_key():
    assert sorted(['a10', 'a9', 'b1', 'a']) == ['a', 'a10', 'a9', 'b1']
    assert sorted(['a10', 'a9', 'b1', 'a'], key=natural_sort_key) == ['a', 'a9', 'a10', 'b1']


def test_get_field_schema(entity_store):
    """Test field definitions and unknown field lookups."""
    assert entity_store.get_field_schema('node', 'field_when').type == 'daterange'
    assert entity_store.get_field_schema('node', 'field_when').recurring is False
    
    with pytest.raises(ConfigurationError):
        entity_store.get_field_schema('node', 'field_missing')
