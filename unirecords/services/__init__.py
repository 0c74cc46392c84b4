"""
Services module containing the record store and its event recording.
"""

from .record_store import RecordStore
from .event_service import EventLog

__all__ = [
    "RecordStore",
    "EventLog",
]
