"""Event store interface and its SQLAlchemy implementation.

The engine only needs two operations from storage: append one event and
fetch an owner's events created at or after a point in time. Anything that
provides them can stand in for :class:`SqlEventStore`.
"""
from __future__ import annotations

import datetime as dt
import json
import logging
from typing import Callable, List, Optional, Protocol

from sqlalchemy import Select, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .errors import StoreError
from .models import AnalyticsEvent
from .schemas import EventRecord, EventRecordDraft

logger = logging.getLogger(__name__)


class EventStore(Protocol):
    def append(self, draft: EventRecordDraft) -> EventRecord:
        ...

    def query_range(self, owner_id: str, since: dt.datetime) -> List[EventRecord]:
        ...


def _as_naive_utc(timestamp: dt.datetime) -> dt.datetime:
    if timestamp.tzinfo is None:
        return timestamp
    return timestamp.astimezone(dt.timezone.utc).replace(tzinfo=None)


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def to_record(row: AnalyticsEvent) -> EventRecord:
    return EventRecord(
        id=row.id,
        owner_id=row.owner_id,
        name=row.name,
        category=row.category,
        value=row.value,
        metadata=json.loads(row.metadata_json or "{}"),
        created_at=row.created_at.replace(tzinfo=dt.timezone.utc),
    )


class SqlEventStore:
    """Event store backed by the ``analytics_events`` table.

    ``clock`` supplies ``created_at`` for appended events and defaults to the
    current UTC time.
    """

    def __init__(self, db: Session, clock: Optional[Callable[[], dt.datetime]] = None) -> None:
        self._db = db
        self._clock = clock or _utcnow

    def append(self, draft: EventRecordDraft) -> EventRecord:
        row = AnalyticsEvent(
            owner_id=draft.owner_id,
            name=draft.name,
            category=draft.category,
            value=draft.value,
            metadata_json=json.dumps(draft.metadata, sort_keys=True, default=str),
            created_at=_as_naive_utc(self._clock()),
        )
        try:
            self._db.add(row)
            self._db.commit()
            self._db.refresh(row)
        except SQLAlchemyError as exc:
            self._db.rollback()
            logger.exception("Failed to append %s event for owner %s", draft.name, draft.owner_id)
            raise StoreError(f"Failed to append event: {exc}") from exc
        return to_record(row)

    def query_range(self, owner_id: str, since: dt.datetime) -> List[EventRecord]:
        """Return the owner's events created at or after ``since``, newest first."""
        stmt: Select[AnalyticsEvent] = (
            select(AnalyticsEvent)
            .where(
                AnalyticsEvent.owner_id == owner_id,
                AnalyticsEvent.created_at >= _as_naive_utc(since),
            )
            .order_by(AnalyticsEvent.created_at.desc(), AnalyticsEvent.id.asc())
        )
        try:
            rows = self._db.execute(stmt).scalars().all()
        except SQLAlchemyError as exc:
            self._db.rollback()
            logger.exception("Failed to query events for owner %s", owner_id)
            raise StoreError(f"Failed to query events: {exc}") from exc
        return [to_record(row) for row in rows]
