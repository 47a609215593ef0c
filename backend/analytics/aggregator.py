"""Fold a batch of usage events into cumulative and per-day metrics."""
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Iterable, Set

from .dispatch import ZERO, MetricDelta, dispatch
from .schemas import DayBucket, EventRecord, MetricsSnapshot


def utc_day(timestamp: dt.datetime) -> dt.date:
    """Calendar day of ``timestamp`` in UTC. Naive timestamps are taken as UTC."""
    if timestamp.tzinfo is not None:
        timestamp = timestamp.astimezone(dt.timezone.utc)
    return timestamp.date()


@dataclass
class _Accumulator:
    plays: int = 0
    revenue: Decimal = ZERO
    gems: Decimal = ZERO
    likes: int = 0
    shares: int = 0
    listeners: Set[str] = field(default_factory=set)

    def add(self, delta: MetricDelta) -> None:
        self.plays += delta.plays
        self.revenue += delta.revenue
        self.gems += delta.gems
        self.likes += delta.likes
        self.shares += delta.shares
        if delta.listener_id is not None:
            self.listeners.add(delta.listener_id)

    def to_snapshot(self) -> MetricsSnapshot:
        return MetricsSnapshot(
            total_plays=self.plays,
            total_revenue=self.revenue,
            total_gems=self.gems,
            total_likes=self.likes,
            total_shares=self.shares,
            unique_listeners=len(self.listeners),
        )

    def to_bucket(self, day: dt.date) -> DayBucket:
        return DayBucket(
            date=day,
            plays=self.plays,
            revenue=self.revenue,
            gems=self.gems,
            likes=self.likes,
            shares=self.shares,
            unique_listeners_count=len(self.listeners),
        )


@dataclass(frozen=True)
class Aggregation:
    """Cumulative metrics plus partial buckets for the days that saw events."""

    metrics: MetricsSnapshot
    days: Dict[dt.date, DayBucket]


def aggregate(events: Iterable[EventRecord]) -> Aggregation:
    """Aggregate ``events`` in a single pass.

    The result does not depend on the order of ``events``: counts are integer
    sums, amounts are exact decimal sums and listeners are collected in sets.
    Days without events are absent from ``Aggregation.days``.
    """
    total = _Accumulator()
    per_day: Dict[dt.date, _Accumulator] = {}

    for event in events:
        delta = dispatch(event)
        total.add(delta)
        day = utc_day(event.created_at)
        bucket = per_day.get(day)
        if bucket is None:
            bucket = per_day[day] = _Accumulator()
        bucket.add(delta)

    return Aggregation(
        metrics=total.to_snapshot(),
        days={day: acc.to_bucket(day) for day, acc in sorted(per_day.items())},
    )
