"""Data models for normalized campus records."""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


class MalformedRecordError(ValueError):
    """Raised when an upstream record cannot be normalized."""


@dataclass
class CanonicalEvent:
    """Normalized calendar event, persisted in the events collection."""
    key: str
    category: str
    title: str
    information: str
    location: str
    room: str
    header_color: Optional[str]
    times: str
    date: str
    date_unix: int
    first_event_today: bool
    start_time: int
    end_time: int
    
    def to_document(self) -> Dict[str, Any]:
        """Render the event in its stored (camelCase) shape."""
        return {
            'key': self.key,
            'category': self.category,
            'title': self.title,
            'information': self.information,
            'location': self.location,
            'room': self.room,
            'headerColor': self.header_color,
            'times': self.times,
            'date': self.date,
            'dateUnix': self.date_unix,
            'firstEventToday': self.first_event_today,
            'startTime': self.start_time,
            'endTime': self.end_time
        }


@dataclass
class CanonicalAnnouncement:
    """Normalized daily message."""
    key: str
    category: str
    title: str
    information: str
    location: str
    header_color: Optional[str]
    
    def to_document(self) -> Dict[str, Any]:
        return {
            'key': self.key,
            'category': self.category,
            'title': self.title,
            'information': self.information,
            'location': self.location,
            'headerColor': self.header_color
        }


@dataclass
class DiningLocation:
    """Configured dining location."""
    name: str
    unit_id: str
    extra_meals: List[str] = field(default_factory=list)


@dataclass
class LocationResult:
    """Outcome of fetching and grouping one dining location's menu."""
    location: str
    ok: bool
    value: Optional[Dict[str, Dict[str, List[Dict[str, str]]]]] = None
    error_kind: Optional[str] = None
    detail: Optional[str] = None
    
    @classmethod
    def success(cls, location: str, menu: dict) -> 'LocationResult':
        return cls(location=location, ok=True, value=menu)
    
    @classmethod
    def failure(cls, location: str, error_kind: str, detail: str) -> 'LocationResult':
        return cls(location=location, ok=False, error_kind=error_kind, detail=detail)


@dataclass
class DiningBatch:
    """Aggregated dining results for one run."""
    menus: Dict[str, dict] = field(default_factory=dict)
    failures: Dict[str, Dict[str, str]] = field(default_factory=dict)
    
    @property
    def has_errors(self) -> bool:
        return bool(self.failures)
    
    def add(self, result: LocationResult) -> None:
        if result.ok:
            self.menus[result.location] = result.value
        else:
            self.failures[result.location] = {
                'errorKind': result.error_kind,
                'detail': result.detail
            }
    
    def to_document(self) -> Dict[str, Any]:
        return {
            'menus': self.menus,
            'error': self.has_errors,
            'failures': self.failures
        }


@dataclass
class SyncResult:
    """Result of sync operation."""
    added: int
    updated: int
    deleted: int
    errors: list[str]
