"""Calendar-day skeleton for a trailing window, filled from aggregated buckets."""
from __future__ import annotations

import datetime as dt
from typing import List, Mapping, Optional

from .schemas import DayBucket, Window


def utc_today(now: Optional[dt.datetime] = None) -> dt.date:
    now = now or dt.datetime.now(dt.timezone.utc)
    if now.tzinfo is not None:
        now = now.astimezone(dt.timezone.utc)
    return now.date()


def window_start(window: Window, today: dt.date) -> dt.date:
    """First calendar day of ``window`` when it ends on ``today`` inclusive."""
    return today - dt.timedelta(days=window.days - 1)


def window_cutoff(window: Window, today: dt.date) -> dt.datetime:
    """Midnight UTC at the start of the window; events at this instant are included."""
    return dt.datetime.combine(window_start(window, today), dt.time.min, tzinfo=dt.timezone.utc)


def window_days(window: Window, today: dt.date) -> List[dt.date]:
    start = window_start(window, today)
    return [start + dt.timedelta(days=offset) for offset in range(window.days)]


def build_series(
    window: Window,
    days: Mapping[dt.date, DayBucket],
    today: dt.date,
) -> List[DayBucket]:
    """Return one bucket per day of the window, oldest first.

    Days missing from ``days`` are zero-filled. Entries in ``days`` that fall
    outside the window are ignored.
    """
    return [days[day] if day in days else DayBucket(date=day) for day in window_days(window, today)]
