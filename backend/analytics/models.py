"""SQLAlchemy models for stored usage events."""
from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Float, Index, String, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def _new_event_id() -> str:
    return uuid.uuid4().hex


def _utcnow() -> datetime:
    # Stored naive; every timestamp in this table is UTC.
    return datetime.now(timezone.utc).replace(tzinfo=None)


class AnalyticsEvent(Base):
    __tablename__ = "analytics_events"
    __table_args__ = (Index("ix_analytics_events_owner_created", "owner_id", "created_at"),)

    id = Column(String(32), primary_key=True, default=_new_event_id)
    owner_id = Column(String(255), index=True, nullable=False)
    name = Column(String(64), nullable=False)
    category = Column(String(64), nullable=False, default="general")
    value = Column(Float, nullable=True)
    metadata_json = Column("metadata", Text, nullable=False, default="{}")
    created_at = Column(DateTime, default=_utcnow, nullable=False, index=True)
