"""Event normalizer for converting upstream calendar records into stored events."""
import logging
import re
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional, Set

from normalizer.colors import resolve_header_color
from normalizer.models import CanonicalEvent, MalformedRecordError
from normalizer.text import append_more_info_link, clean_time, decode_entities

logger = logging.getLogger(__name__)

# "a.m." / "p.m." spellings, with optional inner space
_DOTTED_MERIDIEM = re.compile(r"(?<![a-z])([ap])\.\s*m\.?", re.IGNORECASE)


class EventNormalizer:
    """Normalizer for raw calendar events.
    
    ``firstEventToday`` depends on the order of the input: the first record
    seen for a date is flagged, so callers must pass records in a stable
    (upstream or pre-sorted) order.
    """
    
    RANGE_SEPARATOR = '-'
    UTC_OFFSET = timezone(timedelta(hours=-4))
    DATE_FORMAT = '%Y-%m-%d'
    TIME_FORMATS = [
        '%I:%M %p',      # 12-hour format with AM/PM
        '%I:%M%p',       # 12-hour format without space
        '%I %p',         # Hour only with AM/PM
        '%I%p',          # Hour only without space
        '%H:%M',         # 24-hour format
    ]
    
    def __init__(self, colors: Dict[str, str], skip_malformed: bool = False):
        """
        Initialize the normalizer.
        
        Args:
            colors: Category color table
            skip_malformed: Log and skip records with unparseable timestamps
                instead of failing the whole batch
        """
        self.colors = colors
        self.skip_malformed = skip_malformed
    
    def normalize(self, raw_events: Iterable[Dict[str, Any]]) -> List[CanonicalEvent]:
        """
        Normalize raw events in source order.
        
        Args:
            raw_events: Upstream event records
            
        Returns:
            List of CanonicalEvent objects, all-day and malformed ranges removed
            
        Raises:
            MalformedRecordError: If a record's date or times cannot be parsed
                and skip_malformed is off
        """
        events: Dict[str, CanonicalEvent] = {}
        total = 0
        
        for raw in raw_events:
            total += 1
            try:
                event = self._normalize_single_event(raw)
            except (MalformedRecordError, KeyError, TypeError) as e:
                if not self.skip_malformed:
                    raise
                logger.warning(f"Skipping malformed event {raw.get('ID')!r}: {e}")
                continue
            
            if event:
                if event.key in events:
                    # Later record wins and moves to its own position
                    logger.warning(f"Duplicate event key {event.key!r}; keeping the later record")
                    del events[event.key]
                events[event.key] = event
        
        normalized = list(events.values())
        self._flag_first_events(normalized)
        
        logger.info(f"Normalized {len(normalized)} events out of {total} total records")
        return normalized
    
    def _flag_first_events(self, events: List[CanonicalEvent]) -> None:
        """Mark the first event of each date, in list order."""
        seen_dates: Set[str] = set()
        for event in events:
            event.first_event_today = event.date not in seen_dates
            seen_dates.add(event.date)
    
    def _normalize_single_event(self, raw: Dict[str, Any]) -> Optional[CanonicalEvent]:
        """
        Normalize one event record.
        
        Returns:
            CanonicalEvent, or None for all-day entries without a time range
        """
        time_range = raw.get('time_formatted') or ''
        if self.RANGE_SEPARATOR not in time_range:
            logger.debug(f"Skipping event {raw.get('ID')!r} without a time range: {time_range!r}")
            return None
        
        start_text, end_text = time_range.split(self.RANGE_SEPARATOR)[:2]
        date = raw.get('start_ts') or ''
        
        information = append_more_info_link(
            decode_entities(raw.get('post_content')),
            raw.get('url')
        )
        
        return CanonicalEvent(
            key=str(raw['ID']),
            category=raw.get('category'),
            title=decode_entities(raw.get('title')),
            information=information,
            location=decode_entities(raw.get('venue')),
            room=decode_entities(raw.get('venue_room')),
            header_color=resolve_header_color(self.colors, raw.get('category')),
            times=clean_time(time_range),
            date=date,
            date_unix=self.convert_day_to_unix(date),
            first_event_today=False,
            start_time=self.convert_to_unix(date, start_text),
            end_time=self.convert_to_unix(date, end_text)
        )
    
    def convert_day_to_unix(self, day: str) -> int:
        """
        Convert a date to epoch milliseconds at midnight in the fixed offset.
        
        Raises:
            MalformedRecordError: If the date is not YYYY-MM-DD
        """
        try:
            date_obj = datetime.strptime(day.strip(), self.DATE_FORMAT)
        except ValueError:
            raise MalformedRecordError(f"Invalid event date: {day!r}")
        return self._to_epoch_ms(date_obj)
    
    def convert_to_unix(self, day: str, time_str: str) -> int:
        """
        Combine a date and a clock time into epoch milliseconds.
        
        Raises:
            MalformedRecordError: If no known time format matches
        """
        time_str = _DOTTED_MERIDIEM.sub(r"\1m", time_str.strip())
        stamp = f"{day.strip()} {time_str}"
        
        for fmt in self.TIME_FORMATS:
            try:
                date_obj = datetime.strptime(stamp, f"{self.DATE_FORMAT} {fmt}")
                return self._to_epoch_ms(date_obj)
            except ValueError:
                continue
        
        raise MalformedRecordError(f"Invalid event time: {stamp!r}")
    
    def _to_epoch_ms(self, date_obj: datetime) -> int:
        return int(date_obj.replace(tzinfo=self.UTC_OFFSET).timestamp() * 1000)


def sort_events(events: Iterable[CanonicalEvent]) -> List[CanonicalEvent]:
    """Return events in calendar order (stable sort by start time)."""
    return sorted(events, key=lambda event: event.start_time)
