"""Aggregations over UserHealth event history for charts."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Iterable, Mapping

from services.api.src.dorkfi.domain.models import UserHealthEvent, UserSnapshot
from services.api.src.dorkfi.utils.timestamps import truncate_to_hour


@dataclass
class TrendPoint:
    timestamp_hour: datetime
    average_health_factor: Decimal
    event_count: int


@dataclass
class HealthRange:
    label: str
    count: int


@dataclass
class PositionSizeBucket:
    label: str
    users: int
    total_collateral: Decimal
    total_borrow: Decimal


# (label, lower inclusive, upper exclusive); None = unbounded
HEALTH_RANGES: list[tuple[str, Decimal, Decimal | None]] = [
    ("Critical (<1.2)", Decimal("0"), Decimal("1.2")),
    ("Risky (1.2-1.5)", Decimal("1.2"), Decimal("1.5")),
    ("Moderate (1.5-2.0)", Decimal("1.5"), Decimal("2.0")),
    ("Safe (2.0-3.0)", Decimal("2.0"), Decimal("3.0")),
    ("Very Safe (>3.0)", Decimal("3.0"), None),
]

POSITION_SIZE_RANGES: list[tuple[str, Decimal, Decimal | None]] = [
    ("$0-1K", Decimal("0"), Decimal("1000")),
    ("$1K-10K", Decimal("1000"), Decimal("10000")),
    ("$10K-100K", Decimal("10000"), Decimal("100000")),
    ("$100K-1M", Decimal("100000"), Decimal("1000000")),
    (">$1M", Decimal("1000000"), None),
]


def _in_range(value: Decimal, low: Decimal, high: Decimal | None) -> bool:
    return value >= low and (high is None or value < high)


def hourly_trend(events: Iterable[UserHealthEvent]) -> list[TrendPoint]:
    """Average reported health factor per UTC hour, oldest first."""
    sums: dict[datetime, Decimal] = {}
    counts: dict[datetime, int] = {}

    for event in events:
        if event.reported_health_factor is None:
            continue
        hour = truncate_to_hour(event.timestamp)
        sums[hour] = sums.get(hour, Decimal(0)) + event.reported_health_factor
        counts[hour] = counts.get(hour, 0) + 1

    return [
        TrendPoint(
            timestamp_hour=hour,
            average_health_factor=sums[hour] / counts[hour],
            event_count=counts[hour],
        )
        for hour in sorted(sums)
    ]


def health_distribution(snapshots: Mapping[str, UserSnapshot]) -> list[HealthRange]:
    """Count users per reported health factor range. Empty ranges are dropped."""
    counts = {label: 0 for label, _, _ in HEALTH_RANGES}
    for snapshot in snapshots.values():
        hf = snapshot.reported_health_factor
        if hf is None:
            continue
        for label, low, high in HEALTH_RANGES:
            if _in_range(hf, low, high):
                counts[label] += 1
                break

    return [
        HealthRange(label=label, count=counts[label])
        for label, _, _ in HEALTH_RANGES
        if counts[label] > 0
    ]


def position_size_buckets(
    snapshots: Mapping[str, UserSnapshot],
) -> list[PositionSizeBucket]:
    """Group users by total position size (collateral + borrow)."""
    buckets = {
        label: PositionSizeBucket(
            label=label, users=0, total_collateral=Decimal(0), total_borrow=Decimal(0)
        )
        for label, _, _ in POSITION_SIZE_RANGES
    }

    for snapshot in snapshots.values():
        size = snapshot.total_collateral_value + snapshot.total_borrow_value
        for label, low, high in POSITION_SIZE_RANGES:
            if _in_range(size, low, high):
                bucket = buckets[label]
                bucket.users += 1
                bucket.total_collateral += snapshot.total_collateral_value
                bucket.total_borrow += snapshot.total_borrow_value
                break

    return [b for b in buckets.values() if b.users > 0]
