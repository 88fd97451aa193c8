"""Runtime configuration read from environment variables."""
import json
import os
from dataclasses import dataclass, field
from typing import List, Mapping, Optional

from normalizer.models import DiningLocation

DEFAULT_EVENTS_URL = 'https://events.williams.edu/wp-json/wms/events/v1/list?per_page=500'
DEFAULT_DAILY_MESSAGES_URL = 'https://events.williams.edu/wp-json/wms/events/v1/list/dm/'
DEFAULT_DINING_MENU_URL = 'https://dining.williams.edu/wp-json/dining/service_units/{unit_id}'

DEFAULT_DINING_LOCATIONS = [
    {'name': 'Driscoll', 'unit_id': '27'},
    {'name': 'Mission', 'unit_id': '29'},
    {'name': "Whitmans'", 'unit_id': '209'},
    {'name': 'Eco Cafe', 'unit_id': '38'},
    {'name': "'82 Grill", 'unit_id': '24', 'extra_meals': ['snack bar']},
]

_TRUE_VALUES = {'1', 'true', 'yes', 'on'}


@dataclass
class Settings:
    """Settings shared by the sync handlers."""
    table_name: str = 'campus-feed-sync'
    log_level: str = 'INFO'
    timeout_seconds: int = 30
    max_retries: int = 3
    events_url: str = DEFAULT_EVENTS_URL
    daily_messages_url: str = DEFAULT_DAILY_MESSAGES_URL
    dining_menu_url: str = DEFAULT_DINING_MENU_URL
    dining_locations: List[DiningLocation] = field(default_factory=list)
    dining_workers: int = 4
    time_zone: str = 'America/New_York'
    skip_malformed_records: bool = False


def parse_dining_locations(raw: str) -> List[DiningLocation]:
    """
    Parse the DINING_LOCATIONS JSON list.
    
    Raises:
        ValueError: If the value is not a list of objects with name and unit_id
    """
    entries = json.loads(raw)
    if not isinstance(entries, list):
        raise ValueError("DINING_LOCATIONS must be a JSON list")
    
    locations = []
    for entry in entries:
        try:
            locations.append(DiningLocation(
                name=entry['name'],
                unit_id=str(entry['unit_id']),
                extra_meals=list(entry.get('extra_meals', []))
            ))
        except (KeyError, TypeError, AttributeError) as e:
            raise ValueError(f"Invalid DINING_LOCATIONS entry {entry!r}: {e}")
    return locations


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Read settings from environment variables.
    
    Raises:
        ValueError: If a numeric or JSON variable is malformed
    """
    env = os.environ if environ is None else environ
    
    raw_locations = env.get('DINING_LOCATIONS')
    if raw_locations:
        dining_locations = parse_dining_locations(raw_locations)
    else:
        dining_locations = parse_dining_locations(json.dumps(DEFAULT_DINING_LOCATIONS))
    
    return Settings(
        table_name=env.get('TABLE_NAME', 'campus-feed-sync'),
        log_level=env.get('LOG_LEVEL', 'INFO'),
        timeout_seconds=int(env.get('TIMEOUT_SECONDS', '30')),
        max_retries=int(env.get('MAX_RETRIES', '3')),
        events_url=env.get('EVENTS_URL', DEFAULT_EVENTS_URL),
        daily_messages_url=env.get('DAILY_MESSAGES_URL', DEFAULT_DAILY_MESSAGES_URL),
        dining_menu_url=env.get('DINING_MENU_URL', DEFAULT_DINING_MENU_URL),
        dining_locations=dining_locations,
        dining_workers=int(env.get('DINING_WORKERS', '4')),
        time_zone=env.get('TIME_ZONE', 'America/New_York'),
        skip_malformed_records=env.get('SKIP_MALFORMED_RECORDS', 'false').strip().lower() in _TRUE_VALUES
    )
