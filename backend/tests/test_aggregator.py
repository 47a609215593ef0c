import random
import sys
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from backend.analytics.aggregator import aggregate, utc_day  # noqa: E402
from backend.analytics.schemas import EventRecord, MetricsSnapshot  # noqa: E402

DAY = datetime(2026, 10, 15, 9, 30, tzinfo=timezone.utc)


def _event(idx, name, when=DAY, value=None, metadata=None):
    return EventRecord(
        id=f"evt-{idx}",
        owner_id="artist-1",
        name=name,
        value=value,
        metadata=metadata or {},
        created_at=when,
    )


def _mixed_events():
    events = []
    kinds = [
        ("track_play", None, "fan-a"),
        ("track_play", None, "fan-b"),
        ("purchase", 4.99, None),
        ("service_payment", 20.1, None),
        ("gem_given", 3, None),
        ("gem_received", None, None),
        ("like", None, None),
        ("share", None, None),
        ("unknown_kind", 50.0, "fan-z"),
    ]
    for idx in range(45):
        name, value, listener = kinds[idx % len(kinds)]
        when = DAY - timedelta(days=idx % 5, hours=idx % 7)
        metadata = {"listener_id": f"{listener}-{idx % 3}"} if listener else {}
        events.append(_event(idx, name, when, value, metadata))
    return events


def test_same_day_dispatch_example():
    events = [
        _event(1, "track_play", metadata={"listener_id": "A"}),
        _event(2, "track_play", metadata={"listener_id": "A"}),
        _event(3, "track_play", metadata={"listener_id": "B"}),
        _event(4, "like"),
        _event(5, "purchase", value=9.99),
    ]

    result = aggregate(events)

    bucket = result.days[date(2026, 10, 15)]
    assert bucket.plays == 3
    assert bucket.unique_listeners_count == 2
    assert bucket.likes == 1
    assert bucket.revenue == Decimal("9.99")
    assert bucket.gems == 0
    assert bucket.shares == 0
    assert result.metrics == MetricsSnapshot(
        total_plays=3,
        total_revenue=Decimal("9.99"),
        total_likes=1,
        unique_listeners=2,
    )


def test_empty_input():
    result = aggregate([])
    assert result.metrics == MetricsSnapshot()
    assert result.days == {}


def test_unknown_event_does_not_disturb_others():
    baseline = [_event(1, "track_play", metadata={"listener_id": "A"}), _event(2, "share")]
    with_unknown = baseline + [_event(3, "unknown_kind", value=100.0, metadata={"listener_id": "Z"})]

    assert aggregate(with_unknown).metrics == aggregate(baseline).metrics


def test_unknown_event_still_touches_its_day():
    result = aggregate([_event(1, "unknown_kind")])
    bucket = result.days[date(2026, 10, 15)]
    assert bucket.plays == 0
    assert bucket.revenue == 0
    assert bucket.unique_listeners_count == 0


def test_malformed_value_does_not_abort_batch():
    events = [
        _event(1, "purchase", value=float("inf")),
        _event(2, "purchase", value=2.5),
        _event(3, "like"),
    ]
    metrics = aggregate(events).metrics
    assert metrics.total_revenue == Decimal("2.5")
    assert metrics.total_likes == 1


def test_sum_invariant():
    result = aggregate(_mixed_events())
    buckets = result.days.values()

    assert sum(b.plays for b in buckets) == result.metrics.total_plays
    assert sum(b.revenue for b in buckets) == result.metrics.total_revenue
    assert sum(b.gems for b in buckets) == result.metrics.total_gems
    assert sum(b.likes for b in buckets) == result.metrics.total_likes
    assert sum(b.shares for b in buckets) == result.metrics.total_shares
    assert result.metrics.unique_listeners <= sum(b.unique_listeners_count for b in buckets)


def test_order_independence():
    events = _mixed_events()
    expected = aggregate(events)

    rng = random.Random(1234)
    for _ in range(5):
        shuffled = list(events)
        rng.shuffle(shuffled)
        result = aggregate(shuffled)
        assert result.metrics == expected.metrics
        assert result.days == expected.days
        assert result.metrics.model_dump_json() == expected.metrics.model_dump_json()


def test_listener_sets_are_per_day():
    events = [
        _event(1, "track_play", metadata={"listener_id": "A"}),
        _event(2, "track_play", when=DAY - timedelta(days=1), metadata={"listener_id": "A"}),
    ]
    result = aggregate(events)
    assert [b.unique_listeners_count for b in result.days.values()] == [1, 1]
    assert result.metrics.unique_listeners == 1


def test_bucketing_uses_utc_day():
    eastern = timezone(timedelta(hours=-5))
    late_evening = datetime(2026, 10, 15, 23, 30, tzinfo=eastern)

    assert utc_day(late_evening) == date(2026, 10, 16)
    assert utc_day(datetime(2026, 10, 15, 23, 59)) == date(2026, 10, 15)
    assert list(aggregate([_event(1, "like", when=late_evening)]).days) == [date(2026, 10, 16)]
