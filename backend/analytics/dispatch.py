"""Mapping of a single usage event to the metric deltas it contributes."""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from .schemas import EventRecord

logger = logging.getLogger(__name__)

ZERO = Decimal(0)
ONE = Decimal(1)


class EventKind(str, Enum):
    TRACK_PLAY = "track_play"
    PURCHASE = "purchase"
    SERVICE_PAYMENT = "service_payment"
    GEM_GIVEN = "gem_given"
    GEM_RECEIVED = "gem_received"
    LIKE = "like"
    SHARE = "share"

    @classmethod
    def parse(cls, name: Any) -> Optional["EventKind"]:
        """Return the kind for ``name`` or ``None`` when it is not recognised."""
        try:
            return cls(name)
        except ValueError:
            return None


@dataclass(frozen=True)
class MetricDelta:
    plays: int = 0
    revenue: Decimal = ZERO
    gems: Decimal = ZERO
    likes: int = 0
    shares: int = 0
    listener_id: Optional[str] = None


NO_EFFECT = MetricDelta()


class MalformedValueError(ValueError):
    """Raised by :func:`to_amount` for values that are not finite numbers."""


def to_amount(value: Any) -> Optional[Decimal]:
    """Convert an event value to an exact decimal amount.

    ``None`` stays ``None`` so callers can tell an absent value from zero.
    Floats go through their shortest repr, so ``9.99`` becomes ``Decimal("9.99")``
    rather than its binary expansion.
    """
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        raise MalformedValueError(f"event value {value!r} is not a number")
    if isinstance(value, float) and not math.isfinite(value):
        raise MalformedValueError(f"event value {value!r} is not finite")
    if isinstance(value, Decimal):
        if not value.is_finite():
            raise MalformedValueError(f"event value {value!r} is not finite")
        return value
    return Decimal(repr(value)) if isinstance(value, float) else Decimal(value)


def _listener_id(event: EventRecord) -> Optional[str]:
    listener = (event.metadata or {}).get("listener_id")
    if listener is None or listener == "":
        return None
    return str(listener)


def dispatch(event: EventRecord) -> MetricDelta:
    """Return the metric deltas contributed by ``event``.

    Unrecognised event names contribute nothing. Payment and gem events whose
    value is not a finite number are logged and contribute nothing either.
    """
    kind = EventKind.parse(event.name)
    if kind is None:
        return NO_EFFECT
    try:
        return _apply(kind, event)
    except MalformedValueError as exc:
        logger.warning("Ignoring malformed %s event %s: %s", kind.value, event.id, exc)
        return NO_EFFECT


def _apply(kind: EventKind, event: EventRecord) -> MetricDelta:
    if kind is EventKind.TRACK_PLAY:
        return MetricDelta(plays=1, listener_id=_listener_id(event))
    if kind in (EventKind.PURCHASE, EventKind.SERVICE_PAYMENT):
        amount = to_amount(event.value)
        return MetricDelta(revenue=max(amount, ZERO) if amount is not None else ZERO)
    if kind in (EventKind.GEM_GIVEN, EventKind.GEM_RECEIVED):
        amount = to_amount(event.value)
        return MetricDelta(gems=amount if amount is not None and amount > ZERO else ONE)
    if kind is EventKind.LIKE:
        return MetricDelta(likes=1)
    if kind is EventKind.SHARE:
        return MetricDelta(shares=1)
    raise AssertionError(f"unhandled event kind: {kind!r}")
