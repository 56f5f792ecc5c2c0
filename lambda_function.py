"""AWS Lambda handler serving a view as an iCal feed."""
import json
import logging
import os
import time
from typing import Dict, Any

from botocore.exceptions import ClientError

from feed.ical_serializer import serialize_calendar
from feed.ical_style import IcalStyle
from processor.errors import ConfigurationError, MalformedDateError
from processor.feed_renderer import FeedRenderer
from processor.models import ViewResult
from recurrence.rrule_helper import RecurrenceHelper
from storage.dynamodb_entity_store import DynamoDBEntityStore


# Configure JSON logging
class JsonFormatter(logging.Formatter):
    """Custom JSON formatter for structured logging."""
    
    RESERVED_ATTRS = frozenset(vars(logging.makeLogRecord({})).keys()) | {'message', 'asctime'}
    
    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON, including any extra fields."""
        log_data = {
            'timestamp': self.formatTime(record),
            'level': record.levelname,
            'message': record.getMessage(),
            'logger': record.name
        }
        
        for key, value in record.__dict__.items():
            if key not in self.RESERVED_ATTRS:
                log_data[key] = value
        
        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)
        
        return json.dumps(log_data, default=str)


def setup_logging(log_level: str = 'INFO') -> None:
    """
    Configure logging with JSON formatter.
    
    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
    """
    root_logger = logging.getLogger()
    
    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    
    # Create new handler with JSON formatter
    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root_logger.addHandler(handler)
    
    # Set log level
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))


def load_feed_config() -> Dict[str, Any]:
    """
    Read the feed configuration from environment variables.
    
    FIELD_TYPES is a JSON object mapping each field id of the entity type
    to its storage type, e.g. {"field_when": "daterange", "title": "string"}.
    
    Returns:
        Configuration dict
        
    Raises:
        ConfigurationError: If a numeric setting is not an integer or
            FIELD_TYPES is not a JSON object of strings
    """
    try:
        max_occurrences = int(os.environ.get('MAX_OCCURRENCES', RecurrenceHelper.DEFAULT_MAX_OCCURRENCES))
    except ValueError as e:
        raise ConfigurationError(f"MAX_OCCURRENCES must be an integer: {e}") from e
    
    return {
        'table_name': os.environ.get('TABLE_NAME', 'views-ical-entities'),
        'log_level': os.environ.get('LOG_LEVEL', 'INFO'),
        'entity_type': os.environ.get('ENTITY_TYPE', 'node'),
        'row_plugin': os.environ.get('ROW_PLUGIN', 'fields'),
        'field_types': _parse_field_types(os.environ.get('FIELD_TYPES', '{}')),
        'date_field': os.environ.get('DATE_FIELD'),
        'summary_field': os.environ.get('SUMMARY_FIELD'),
        'location_field': os.environ.get('LOCATION_FIELD'),
        'description_field': os.environ.get('DESCRIPTION_FIELD'),
        'default_timezone': os.environ.get('DEFAULT_TIMEZONE', 'UTC'),
        'timezone_override': os.environ.get('TIMEZONE_OVERRIDE'),
        'max_occurrences': max_occurrences,
        'calendar_name': os.environ.get('CALENDAR_NAME')
    }


def _parse_field_types(raw: str) -> Dict[str, str]:
    """Parse the field id -> storage type mapping of the entity type."""
    try:
        field_types = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"FIELD_TYPES is not valid JSON: {e}") from e
    
    if not isinstance(field_types, dict) or not all(
        isinstance(key, str) and isinstance(value, str) for key, value in field_types.items()
    ):
        raise ConfigurationError("FIELD_TYPES must map field ids to type names")
    return field_types


def _error_response(message: str, error: Exception, start_time: float) -> Dict[str, Any]:
    duration = time.time() - start_time
    return {
        'statusCode': 500,
        'headers': {'Content-Type': 'application/json'},
        'body': json.dumps({
            'message': message,
            'error': str(error),
            'error_type': type(error).__name__,
            'duration_seconds': round(duration, 2)
        })
    }


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Main Lambda handler rendering the configured view as an iCal feed.
    
    Args:
        event: API Gateway event payload; the optional 'timezone' query
            parameter selects the viewer timezone
        context: Lambda context object
        
    Returns:
        Response dict with the iCalendar body, or a JSON error body
    """
    start_time = time.time()
    log_level = os.environ.get('LOG_LEVEL', 'INFO')
    
    # Initialize logging
    setup_logging(log_level)
    logger = logging.getLogger(__name__)
    
    try:
        config = load_feed_config()
        query = (event or {}).get('queryStringParameters') or {}
        viewer_timezone = query.get('timezone') or config['default_timezone']
        
        logger.info(
            "Feed render started",
            extra={
                'table_name': config['table_name'],
                'entity_type': config['entity_type'],
                'date_field': config['date_field'],
                'viewer_timezone': viewer_timezone
            }
        )
        
        # Instantiate components
        store = DynamoDBEntityStore.from_field_types(
            config['entity_type'],
            config['field_types'],
            table_name=config['table_name']
        )
        renderer = FeedRenderer(store, RecurrenceHelper(config['max_occurrences']))
        style = IcalStyle(
            {
                'date_field': config['date_field'],
                'summary_field': config['summary_field'],
                'location_field': config['location_field'],
                'description_field': config['description_field']
            },
            renderer
        )
        
        rows = store.load_rows(config['entity_type'])
        view = ViewResult(
            rows=rows,
            entity_type=config['entity_type'],
            row_plugin=config['row_plugin'],
            date_field_settings={'timezone_override': config['timezone_override']}
        )
        
        drafts = style.render(view, viewer_timezone)
        body = serialize_calendar(drafts, calendar_name=config['calendar_name'])
        
    except ConfigurationError as e:
        logger.error(
            f"Feed configuration error: {e}",
            extra={'error_type': type(e).__name__},
            exc_info=True
        )
        return _error_response('Feed configuration error', e, start_time)
    
    except MalformedDateError as e:
        logger.error(
            f"Malformed stored date data: {e}",
            extra={'error_type': type(e).__name__},
            exc_info=True
        )
        return _error_response('Malformed stored date data', e, start_time)
    
    except ClientError as e:
        logger.error(
            f"Failed to load entities from DynamoDB: {e}",
            extra={'error_type': type(e).__name__},
            exc_info=True
        )
        return _error_response('Failed to load feed rows', e, start_time)
    
    except Exception as e:
        logger.error(
            f"Feed render failed: {str(e)}",
            extra={'error_type': type(e).__name__},
            exc_info=True
        )
        return _error_response('Feed render failed', e, start_time)
    
    duration = time.time() - start_time
    logger.info(
        "Feed render completed successfully",
        extra={
            'duration_seconds': round(duration, 2),
            'rows': len(rows),
            'events': len(drafts)
        }
    )
    
    return {
        'statusCode': 200,
        'headers': {
            'Content-Type': 'text/calendar; charset=utf-8',
            'Content-Disposition': 'attachment; filename="calendar.ics"'
        },
        'body': body.decode('utf-8')
    }
