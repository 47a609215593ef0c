"""Validate and append new usage events."""
from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from typing import Any, Optional

from .errors import ValidationError
from .schemas import EventRecord, EventRecordDraft
from .store import EventStore

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY = "general"


def _require_text(field: str, value: Any) -> str:
    if value is None or not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field} is required")
    return value.strip()


def _check_value(value: Any) -> Optional[float]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"value must be a number, got {value!r}")
    if not math.isfinite(value):
        raise ValidationError("value must be finite")
    if value < 0:
        raise ValidationError("value must not be negative")
    return float(value)


def record_event(
    store: EventStore,
    owner_id: Optional[str],
    name: Optional[str],
    value: Optional[float] = None,
    metadata: Optional[Mapping[str, Any]] = None,
    category: Optional[str] = None,
) -> EventRecord:
    """Append a usage event for ``owner_id`` and return the stored record.

    Raises :class:`ValidationError` without touching the store when the input
    is invalid. Store failures surface as ``StoreError``. Names outside the
    known event kinds are stored as-is; they simply never count toward any
    metric.
    """
    owner = _require_text("owner_id", owner_id)
    event_name = _require_text("name", name)
    checked_value = _check_value(value)
    if metadata is not None and not isinstance(metadata, Mapping):
        raise ValidationError("metadata must be a mapping")

    draft = EventRecordDraft(
        owner_id=owner,
        name=event_name,
        category=(category or "").strip() or DEFAULT_CATEGORY,
        value=checked_value,
        metadata=dict(metadata or {}),
    )
    record = store.append(draft)
    logger.info("Recorded %s event %s for owner %s", record.name, record.id, record.owner_id)
    return record
