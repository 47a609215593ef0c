"""Query path: fetch an owner's window of events and build the report."""
from __future__ import annotations

import datetime as dt
import logging
from typing import List, Optional, Sequence

from .aggregator import aggregate, utc_day
from .schemas import AnalyticsReport, EventRecord, Window
from .series import build_series, utc_today, window_cutoff, window_start
from .store import EventStore

logger = logging.getLogger(__name__)


def _within_window(
    events: Sequence[EventRecord], window: Window, today: dt.date
) -> List[EventRecord]:
    first_day = window_start(window, today)
    kept = [event for event in events if first_day <= utc_day(event.created_at) <= today]
    dropped = len(events) - len(kept)
    if dropped:
        logger.debug("Dropped %d events outside %s..%s", dropped, first_day, today)
    return kept


def list_events(
    store: EventStore,
    owner_id: str,
    window: Window = Window.THIRTY_DAYS,
    today: Optional[dt.date] = None,
) -> List[EventRecord]:
    """Return the owner's events inside the window, newest first."""
    window = Window(window)
    today = today or utc_today()
    events = _within_window(store.query_range(owner_id, window_cutoff(window, today)), window, today)
    return sorted(events, key=lambda event: (event.created_at, event.id), reverse=True)


def query_analytics(
    store: EventStore,
    owner_id: str,
    window: Window = Window.THIRTY_DAYS,
    today: Optional[dt.date] = None,
) -> AnalyticsReport:
    """Recompute metrics and the daily series for ``owner_id`` from the store.

    The cumulative metrics and the series are built from the same filtered
    events, so per-day plays, revenue, gems, likes and shares always add up
    to the cumulative totals.
    """
    window = Window(window)
    today = today or utc_today()
    events = _within_window(store.query_range(owner_id, window_cutoff(window, today)), window, today)
    result = aggregate(events)
    return AnalyticsReport(
        owner_id=owner_id,
        window=window,
        start_date=window_start(window, today),
        end_date=today,
        metrics=result.metrics,
        series=build_series(window, result.days, today),
    )
