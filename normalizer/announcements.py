"""Normalizer for daily messages (announcements)."""
import logging
from typing import Any, Dict

from normalizer.colors import resolve_header_color
from normalizer.models import CanonicalAnnouncement
from normalizer.text import decode_entities

logger = logging.getLogger(__name__)

EVENT_TYPE = 'event'


def normalize_announcements(payload: Any, colors: Dict[str, str]) -> Dict[str, Dict[str, Any]]:
    """
    Flatten a category-keyed daily message payload into one mapping.
    
    Entries typed as events are skipped since the events sync owns them.
    Identifiers repeated across categories keep the last entry seen.
    
    Args:
        payload: Mapping of category name to a list of raw entries
        colors: Category color table
        
    Returns:
        Mapping of entry ID (as a string) to stored announcement documents
    """
    if not isinstance(payload, dict):
        # Upstream returns an empty list on days without messages
        logger.info(f"Daily message payload is {type(payload).__name__}, not a mapping; nothing to normalize")
        return {}
    
    announcements = {}
    skipped = 0
    
    for entries in payload.values():
        for entry in entries or []:
            if entry.get('type') == EVENT_TYPE:
                skipped += 1
                continue
            
            announcement = CanonicalAnnouncement(
                key=str(entry['ID']),
                category=entry.get('category'),
                title=decode_entities(entry.get('title')),
                information=decode_entities(entry.get('post_content')),
                location=decode_entities(entry.get('venue')),
                header_color=resolve_header_color(colors, entry.get('category'))
            )
            announcements[announcement.key] = announcement.to_document()
    
    logger.info(
        f"Normalized {len(announcements)} daily messages across {len(payload)} "
        f"categories ({skipped} events skipped)"
    )
    return announcements
