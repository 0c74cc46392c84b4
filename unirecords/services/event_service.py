"""
Event recording for the record store's publish/subscribe hook.
"""

import threading
from collections import defaultdict
from typing import Dict, Iterable, List, Optional

from ..core.entities import Event
from ..core.enums import EventType
from ..core.interfaces import EventHandler


class EventLog(EventHandler):
    """In-memory handler that keeps every event it receives, grouped by stream."""

    def __init__(self, event_types: Optional[Iterable[EventType]] = None):
        self._event_types = {t.value for t in event_types} if event_types else None
        self._events: List[Event] = []
        self._streams: Dict[str, List[Event]] = defaultdict(list)
        self._lock = threading.RLock()

    def can_handle(self, event_type: str) -> bool:
        return self._event_types is None or event_type in self._event_types

    def handle_event(self, event: Event) -> None:
        with self._lock:
            self._events.append(event)
            self._streams[event.stream_id].append(event)

    def events(self, event_type: Optional[EventType] = None) -> List[Event]:
        """Get recorded events, optionally of one type, oldest first."""
        with self._lock:
            if event_type is None:
                return list(self._events)
            return [e for e in self._events if e.event_type == event_type]

    def get_stream(self, stream_id: str) -> List[Event]:
        """Get events for a stream."""
        with self._lock:
            return list(self._streams.get(stream_id, []))

    def get_statistics(self) -> Dict[str, int]:
        """Count recorded events per type."""
        with self._lock:
            counts: Dict[str, int] = defaultdict(int)
            for event in self._events:
                counts[event.event_type.value] += 1
            return dict(counts)

    def clear(self) -> None:
        with self._lock:
            self._events.clear()
            self._streams.clear()
