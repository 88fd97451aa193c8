"""Fetch -> normalize -> persist pipelines for each scheduled job."""
import logging
from datetime import datetime
from typing import List, Optional
from zoneinfo import ZoneInfo

from normalizer.announcements import normalize_announcements
from normalizer.colors import RESOURCES_COLLECTION, load_category_colors
from normalizer.dining import collect_menus, merge_with_defaults
from normalizer.events import EventNormalizer, sort_events
from normalizer.models import DiningBatch, DiningLocation
from storage.reconciler import reconcile

logger = logging.getLogger(__name__)

EVENTS_COLLECTION = 'events'
DAILY_MESSAGES_COLLECTION = 'dailyMessages'
DINING_MENUS_COLLECTION = 'diningMenus'
DEFAULT_MENUS_DOC = 'defaultMenus'
SORTED_INDEX_KEY = '_sortedIndex'


def today_key(tz_name: str = 'America/New_York', now: Optional[datetime] = None) -> str:
    """Return today's date in the given zone as YYYY-MM-DD."""
    zone = ZoneInfo(tz_name)
    current = now.astimezone(zone) if now else datetime.now(zone)
    return current.strftime('%Y-%m-%d')


def sync_events(client, store, url: str, skip_malformed: bool = False) -> dict:
    """
    Replace the events collection with the latest upstream snapshot.
    
    Stored events missing from the snapshot are deleted; the sorted index
    document is rewritten afterwards and never swept.
    
    Returns:
        Summary with fetch/normalize counts and the SyncResult
    """
    raw_events = client.fetch_json(url)
    logger.info(f"Fetched {len(raw_events)} raw events")
    
    colors = load_category_colors(store)
    events = EventNormalizer(colors, skip_malformed=skip_malformed).normalize(raw_events)
    
    collection = store.collection(EVENTS_COLLECTION)
    result = reconcile(
        collection,
        {event.key: event.to_document() for event in events},
        reserved_keys=[SORTED_INDEX_KEY]
    )
    
    collection.doc(SORTED_INDEX_KEY).set(
        {'keys': [event.key for event in sort_events(events)]}
    )
    
    return {
        'raw_records_fetched': len(raw_events),
        'records_normalized': len(events),
        'sync_result': result
    }


def sync_daily_messages(client, store, url: str, date_key: str) -> dict:
    """Replace the given day's daily message document."""
    payload = client.fetch_json(url)
    
    colors = load_category_colors(store)
    announcements = normalize_announcements(payload, colors)
    
    store.collection(DAILY_MESSAGES_COLLECTION).doc(date_key).set(announcements)
    
    return {
        'date': date_key,
        'records_normalized': len(announcements)
    }


def sync_dining_menus(client, store, locations: List[DiningLocation], url_template: str,
                      date_key: str, max_workers: int = 4) -> DiningBatch:
    """
    Fetch every dining location and replace the given day's menu document.
    
    Locations that fail are reported in the stored document's failures and
    fall back to the default menus, if any are configured.
    
    Returns:
        The DiningBatch that was persisted
    """
    batch = collect_menus(client, locations, url_template, max_workers=max_workers)
    
    defaults = store.collection(RESOURCES_COLLECTION).doc(DEFAULT_MENUS_DOC).get() or {}
    batch = merge_with_defaults(batch, defaults)
    
    store.collection(DINING_MENUS_COLLECTION).doc(date_key).set(batch.to_document())
    
    if batch.has_errors:
        logger.warning(
            f"Stored dining menus for {date_key} with failed locations: "
            f"{', '.join(sorted(batch.failures))}"
        )
    return batch
