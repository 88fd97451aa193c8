"""AWS Lambda handlers for the campus feed sync jobs."""
import json
import logging
import time
from typing import Dict, Any

from fetcher.campus_api import CampusApiClient
from jobs.config import load_settings
from jobs.pipelines import sync_daily_messages, sync_dining_menus, sync_events, today_key
from storage.document_store import DocumentStore


_RESERVED_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord('', logging.INFO, '', 0, '', (), None))
) | {'message', 'asctime'}


# Configure JSON logging
class JsonFormatter(logging.Formatter):
    """Custom JSON formatter for structured logging."""
    
    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data = {
            'timestamp': self.formatTime(record),
            'level': record.levelname,
            'message': record.getMessage(),
            'logger': record.name
        }
        
        # Fields passed through ``extra=``
        for key, value in record.__dict__.items():
            if key not in _RESERVED_RECORD_ATTRS and key not in log_data:
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
    
    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root_logger.addHandler(handler)
    
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))


def _response(status_code: int, body: Dict[str, Any]) -> Dict[str, Any]:
    return {'statusCode': status_code, 'body': json.dumps(body)}


def _failure(logger: logging.Logger, message: str, error: Exception, start_time: float) -> Dict[str, Any]:
    """Log a failed run and build its error response."""
    duration = time.time() - start_time
    logger.error(
        f"{message}: {str(error)}",
        extra={
            'duration_seconds': round(duration, 2),
            'error_type': type(error).__name__
        },
        exc_info=True
    )
    return _response(500, {
        'message': message,
        'error': str(error),
        'error_type': type(error).__name__,
        'duration_seconds': round(duration, 2)
    })


def sync_events_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Daily job: mirror the upstream event list into the events collection.
    
    Args:
        event: EventBridge event payload
        context: Lambda context object
        
    Returns:
        Response dict with statusCode and summary statistics
    """
    start_time = time.time()
    logger = logging.getLogger(__name__)
    
    try:
        settings = load_settings()
        setup_logging(settings.log_level)
        logger.info("Events sync started", extra={'table_name': settings.table_name})
        
        client = CampusApiClient(timeout=settings.timeout_seconds, max_retries=settings.max_retries)
        store = DocumentStore(table_name=settings.table_name)
        
        summary = sync_events(
            client,
            store,
            settings.events_url,
            skip_malformed=settings.skip_malformed_records
        )
    except Exception as e:
        return _failure(logger, 'Events sync failed', e, start_time)
    
    sync_result = summary['sync_result']
    duration = time.time() - start_time
    logger.info(
        "Events sync completed",
        extra={
            'duration_seconds': round(duration, 2),
            'events_added': sync_result.added,
            'events_updated': sync_result.updated,
            'events_deleted': sync_result.deleted,
            'errors': sync_result.errors
        }
    )
    
    return _response(200, {
        'message': 'Events sync completed successfully',
        'statistics': {
            'raw_events_fetched': summary['raw_records_fetched'],
            'valid_events_processed': summary['records_normalized'],
            'events_added': sync_result.added,
            'events_updated': sync_result.updated,
            'events_deleted': sync_result.deleted,
            'duration_seconds': round(duration, 2)
        },
        'errors': sync_result.errors
    })


def sync_daily_messages_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """Weekday job: store today's daily messages."""
    start_time = time.time()
    logger = logging.getLogger(__name__)
    
    try:
        settings = load_settings()
        setup_logging(settings.log_level)
        logger.info("Daily messages sync started", extra={'table_name': settings.table_name})
        
        client = CampusApiClient(timeout=settings.timeout_seconds, max_retries=settings.max_retries)
        store = DocumentStore(table_name=settings.table_name)
        
        summary = sync_daily_messages(
            client,
            store,
            settings.daily_messages_url,
            today_key(settings.time_zone)
        )
    except Exception as e:
        return _failure(logger, 'Daily messages sync failed', e, start_time)
    
    duration = time.time() - start_time
    logger.info(
        "Daily messages sync completed",
        extra={'duration_seconds': round(duration, 2), **summary}
    )
    
    return _response(200, {
        'message': 'Daily messages sync completed successfully',
        'statistics': {
            'date': summary['date'],
            'messages_stored': summary['records_normalized'],
            'duration_seconds': round(duration, 2)
        }
    })


def sync_dining_menus_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Dining job: store today's menus for every configured location.
    
    Individual location failures do not fail the run; they are reported
    in the response and in the stored document.
    """
    start_time = time.time()
    logger = logging.getLogger(__name__)
    
    try:
        settings = load_settings()
        setup_logging(settings.log_level)
        logger.info(
            "Dining menus sync started",
            extra={
                'table_name': settings.table_name,
                'locations': len(settings.dining_locations)
            }
        )
        
        client = CampusApiClient(timeout=settings.timeout_seconds, max_retries=settings.max_retries)
        store = DocumentStore(table_name=settings.table_name)
        date_key = today_key(settings.time_zone)
        
        batch = sync_dining_menus(
            client,
            store,
            settings.dining_locations,
            settings.dining_menu_url,
            date_key,
            max_workers=settings.dining_workers
        )
    except Exception as e:
        return _failure(logger, 'Dining menus sync failed', e, start_time)
    
    duration = time.time() - start_time
    logger.info(
        "Dining menus sync completed",
        extra={
            'duration_seconds': round(duration, 2),
            'locations_stored': len(batch.menus),
            'locations_failed': len(batch.failures)
        }
    )
    
    return _response(200, {
        'message': 'Dining menus sync completed' + (' with errors' if batch.has_errors else ' successfully'),
        'statistics': {
            'date': date_key,
            'locations_stored': len(batch.menus),
            'locations_failed': len(batch.failures),
            'duration_seconds': round(duration, 2)
        },
        'errors': batch.failures
    })
