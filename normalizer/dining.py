"""Dining menu normalizer: groups menu items into meal -> course -> items."""
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, Iterable, List

import requests

from normalizer.models import DiningBatch, DiningLocation, LocationResult

logger = logging.getLogger(__name__)

RECOGNIZED_MEALS = frozenset(['breakfast', 'brunch', 'lunch', 'dinner'])
DEFAULT_COURSE = 'Entrees'


def group_menu_items(items: Iterable[Dict[str, Any]], extra_meals: Iterable[str] = ()) -> Dict[str, Dict[str, List[Dict[str, str]]]]:
    """
    Group flat menu items by meal, then by course.
    
    Meal labels are matched case-insensitively against the recognized meals
    plus any location-specific extras; other meals are dropped. Items
    without a course land under DEFAULT_COURSE.
    
    Args:
        items: Raw menu item records with 'meal', 'course' and 'name'
        extra_meals: Additional meal labels allowed for this location
        
    Returns:
        Mapping of lower-cased meal to course to list of menu items
    """
    allowed = RECOGNIZED_MEALS | {meal.strip().lower() for meal in extra_meals}
    menu: Dict[str, Dict[str, List[Dict[str, str]]]] = {}
    dropped = 0
    
    for item in items:
        meal = (item.get('meal') or '').strip().lower()
        if meal not in allowed:
            dropped += 1
            continue
        
        course = (item.get('course') or '').strip() or DEFAULT_COURSE
        menu.setdefault(meal, {}).setdefault(course, []).append(
            {'name': (item.get('name') or '').strip()}
        )
    
    if dropped:
        logger.debug(f"Dropped {dropped} menu items with unrecognized meals")
    return menu


def fetch_location_menu(client, location: DiningLocation, url_template: str) -> LocationResult:
    """
    Fetch and group one location's menu without raising.
    
    Args:
        client: CampusApiClient used for the request
        location: Dining location to fetch
        url_template: Menu URL with a {unit_id} placeholder
        
    Returns:
        LocationResult tagged ok, or with error_kind 'fetch', 'parse' or 'normalize'
    """
    url = url_template.format(unit_id=location.unit_id)
    
    try:
        items = client.fetch_json(url)
    except requests.RequestException as e:
        logger.error(f"Failed to fetch menu for {location.name}: {e}")
        return LocationResult.failure(location.name, 'fetch', str(e))
    except ValueError as e:
        logger.error(f"Invalid menu payload for {location.name}: {e}")
        return LocationResult.failure(location.name, 'parse', str(e))
    
    if not isinstance(items, list):
        detail = f"expected a list of menu items, got {type(items).__name__}"
        logger.error(f"Invalid menu payload for {location.name}: {detail}")
        return LocationResult.failure(location.name, 'parse', detail)
    
    try:
        menu = group_menu_items(items, location.extra_meals)
    except (AttributeError, TypeError) as e:
        logger.error(f"Failed to group menu for {location.name}: {e}")
        return LocationResult.failure(location.name, 'normalize', str(e))
    
    logger.info(f"Grouped {len(items)} menu items for {location.name} into {len(menu)} meals")
    return LocationResult.success(location.name, menu)


def collect_menus(client, locations: List[DiningLocation], url_template: str, max_workers: int = 4) -> DiningBatch:
    """
    Fetch every location concurrently and wait for all of them.
    
    A failed location is recorded in the batch's failures; it never
    cancels or hides the other locations.
    
    Returns:
        DiningBatch with successful menus and per-location failures
    """
    batch = DiningBatch()
    if not locations:
        return batch
    
    with ThreadPoolExecutor(max_workers=max(1, max_workers)) as executor:
        futures = [
            executor.submit(fetch_location_menu, client, location, url_template)
            for location in locations
        ]
        # Results are collected in configuration order
        for location, future in zip(locations, futures):
            try:
                result = future.result()
            except Exception as e:
                logger.error(f"Unexpected error collecting menu for {location.name}: {e}", exc_info=True)
                result = LocationResult.failure(location.name, 'unexpected', str(e))
            batch.add(result)
    
    logger.info(
        f"Collected menus for {len(batch.menus)} of {len(locations)} locations "
        f"({len(batch.failures)} failed)"
    )
    return batch


def merge_with_defaults(batch: DiningBatch, defaults: Dict[str, dict]) -> DiningBatch:
    """Layer fetched menus over the default menus; failures are kept as-is."""
    merged = dict(defaults or {})
    merged.update(batch.menus)
    return DiningBatch(menus=merged, failures=dict(batch.failures))
