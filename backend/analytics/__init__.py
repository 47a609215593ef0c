"""Usage analytics engine: event recording and windowed aggregation."""
from __future__ import annotations

from .errors import AnalyticsError, StoreError, ValidationError
from .recorder import record_event
from .schemas import AnalyticsReport, DayBucket, EventRecord, EventRecordDraft, MetricsSnapshot, Window
from .service import list_events, query_analytics
from .store import EventStore, SqlEventStore

__all__ = [
    "AnalyticsError",
    "AnalyticsReport",
    "DayBucket",
    "EventRecord",
    "EventRecordDraft",
    "EventStore",
    "MetricsSnapshot",
    "SqlEventStore",
    "StoreError",
    "ValidationError",
    "Window",
    "list_events",
    "query_analytics",
    "record_event",
]
