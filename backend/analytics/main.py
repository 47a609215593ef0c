"""FastAPI application entrypoint for the usage analytics API."""
from __future__ import annotations

import logging
import os
import threading
import time
from typing import List

from fastapi import Depends, FastAPI, HTTPException, Query, Request, status
from sqlalchemy.orm import Session

from . import schemas
from .database import SessionLocal, engine
from .errors import StoreError, ValidationError
from .models import Base
from .recorder import record_event
from .service import list_events, query_analytics
from .store import SqlEventStore

logger = logging.getLogger(__name__)

Base.metadata.create_all(bind=engine)

app = FastAPI(
    title="Usage Analytics API",
    description="API for recording usage events and retrieving windowed analytics.",
    version="0.1.0",
)


def get_db() -> Session:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


class RateLimitError(Exception):
    """Raised when a caller exceeds the configured rate limit."""


class FixedWindowRateLimiter:
    """Simple in-memory fixed window rate limiter keyed by identifier."""

    def __init__(self, max_requests: int, window_seconds: int) -> None:
        self._max_requests = max_requests
        self._window_seconds = window_seconds
        self._counters: dict[str, tuple[int, float]] = {}
        self._lock = threading.Lock()

    def check(self, key: str) -> None:
        now = time.monotonic()
        with self._lock:
            count, window_start = self._counters.get(key, (0, now))
            if now - window_start >= self._window_seconds:
                count = 0
                window_start = now
            if count >= self._max_requests:
                raise RateLimitError(f"Rate limit exceeded for key {key}")
            self._counters[key] = (count + 1, window_start)


def _get_rate_limiter() -> FixedWindowRateLimiter:
    requests_per_window = int(os.environ.get("ANALYTICS_RATE_LIMIT", "60"))
    window_seconds = int(os.environ.get("ANALYTICS_RATE_WINDOW", "60"))
    return FixedWindowRateLimiter(requests_per_window, window_seconds)


_analytics_rate_limiter = _get_rate_limiter()


def _store_unavailable(exc: StoreError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc))


@app.post("/events", response_model=schemas.EventRecord, status_code=status.HTTP_201_CREATED)
def ingest_event(
    event_in: schemas.EventIn,
    db: Session = Depends(get_db),
) -> schemas.EventRecord:
    try:
        return record_event(
            SqlEventStore(db),
            owner_id=event_in.owner_id,
            name=event_in.name,
            value=event_in.value,
            metadata=event_in.metadata,
            category=event_in.category,
        )
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    except StoreError as exc:
        raise _store_unavailable(exc)


@app.get("/events", response_model=List[schemas.EventRecord])
def list_owner_events(
    owner_id: str = Query(..., min_length=1),
    window: schemas.Window = Query(schemas.Window.THIRTY_DAYS),
    db: Session = Depends(get_db),
) -> List[schemas.EventRecord]:
    try:
        return list_events(SqlEventStore(db), owner_id, window)
    except StoreError as exc:
        raise _store_unavailable(exc)


@app.get("/analytics", response_model=schemas.AnalyticsReport)
def get_analytics(
    request: Request,
    owner_id: str = Query(..., min_length=1),
    window: schemas.Window = Query(schemas.Window.THIRTY_DAYS),
    db: Session = Depends(get_db),
) -> schemas.AnalyticsReport:
    client_identifier = "anonymous"
    if request.client:
        client_identifier = request.client.host or client_identifier

    try:
        _analytics_rate_limiter.check(client_identifier)
    except RateLimitError:
        raise HTTPException(status_code=status.HTTP_429_TOO_MANY_REQUESTS, detail="Rate limit exceeded")

    try:
        return query_analytics(SqlEventStore(db), owner_id, window)
    except StoreError as exc:
        raise _store_unavailable(exc)


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


def reset_application_state() -> None:
    """Reset mutable globals for test isolation."""

    global _analytics_rate_limiter
    _analytics_rate_limiter = _get_rate_limiter()
