"""Pydantic models for events, request bodies and analytics reports."""
from __future__ import annotations

import datetime as dt
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer

# Exact in memory, plain numbers on the wire.
Amount = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class Window(str, Enum):
    """Trailing window of calendar days ending today."""

    SEVEN_DAYS = "7d"
    THIRTY_DAYS = "30d"
    NINETY_DAYS = "90d"

    @property
    def days(self) -> int:
        return int(self.value[:-1])


class EventIn(BaseModel):
    owner_id: Optional[str] = Field(None, description="Account the event belongs to")
    name: Optional[str] = Field(None, description="Event kind, e.g. track_play or purchase")
    category: Optional[str] = Field(None, description="Free-form classification label")
    value: Optional[float] = Field(
        None,
        description="Currency amount for payments, gem count for gem events; ignored otherwise",
    )
    metadata: Optional[Dict[str, Any]] = Field(
        default=None,
        description="Optional metadata; listener_id is used for unique listener counts.",
    )


class EventRecordDraft(BaseModel):
    """An event as handed to the store, before it has an id or timestamp."""

    model_config = ConfigDict(frozen=True)

    owner_id: str
    name: str
    category: str = "general"
    value: Optional[float] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)


class EventRecord(EventRecordDraft):
    id: str
    created_at: dt.datetime


class MetricsSnapshot(BaseModel):
    total_plays: int = 0
    total_revenue: Amount = Decimal(0)
    total_gems: Amount = Decimal(0)
    total_likes: int = 0
    total_shares: int = 0
    unique_listeners: int = 0


class DayBucket(BaseModel):
    date: dt.date
    plays: int = 0
    revenue: Amount = Decimal(0)
    gems: Amount = Decimal(0)
    likes: int = 0
    shares: int = 0
    unique_listeners_count: int = 0


class AnalyticsReport(BaseModel):
    owner_id: str
    window: Window
    start_date: dt.date
    end_date: dt.date
    metrics: MetricsSnapshot
    series: List[DayBucket]
