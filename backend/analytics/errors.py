"""Exceptions raised by the analytics engine."""
from __future__ import annotations


class AnalyticsError(Exception):
    """Base class for analytics engine failures."""


class ValidationError(AnalyticsError):
    """Raised when input to ``record_event`` is missing or invalid."""


class StoreError(AnalyticsError):
    """Raised when the event store fails to append or query events."""
