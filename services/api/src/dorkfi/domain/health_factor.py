"""Health factor calculation, latest-state reduction and risk classification."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from services.api.src.dorkfi.domain.models import (
    HealthResult,
    RiskBadge,
    RiskLevel,
    RiskThresholds,
    UserHealthEvent,
    UserSnapshot,
)

# Flat approximation of the liquidation threshold (80%)
DEFAULT_COLLATERAL_FACTOR = Decimal("0.8")

# Display ceiling; also the value reported for accounts without debt
MAX_HEALTH_FACTOR = Decimal("3.0")

DEFAULT_RISK_THRESHOLDS = RiskThresholds()

# "Liquidate Now" is offered at or below this health factor
LIQUIDATION_ACTION_THRESHOLD = Decimal("1.0")


@dataclass(frozen=True)
class CollateralPosition:
    """Collateral held in one market with that market's liquidation threshold."""

    symbol: str
    value_usd: Decimal
    liquidation_threshold: Decimal  # decimal, 0.825 = 82.5%


def reduce_latest(events: Iterable[UserHealthEvent]) -> dict[str, UserSnapshot]:
    """
    Collapse an event stream to the latest event per user.

    An event replaces the stored one only if its timestamp is strictly greater,
    so among equal timestamps the first one seen is kept.
    """
    latest: dict[str, UserSnapshot] = {}
    for event in events:
        existing = latest.get(event.user_id)
        if existing is None or event.timestamp > existing.timestamp:
            latest[event.user_id] = event
    return latest


def compute_health(
    snapshot: UserSnapshot,
    collateral_factor: Decimal = DEFAULT_COLLATERAL_FACTOR,
) -> HealthResult:
    """
    Calculate health factor and LTV for a snapshot.

    HF = min(3.0, collateral × collateral_factor / borrow)
    LTV = borrow / collateral × 100

    No debt reports the 3.0 ceiling, debt without collateral reports 0.
    """
    if not Decimal(0) < collateral_factor <= Decimal(1):
        raise ValueError(f"collateral_factor must be in (0, 1], got {collateral_factor}")

    collateral = snapshot.total_collateral_value
    borrow = snapshot.total_borrow_value

    ltv = (borrow / collateral) * 100 if collateral > 0 else Decimal(0)

    if borrow == 0:
        return HealthResult(health_factor=MAX_HEALTH_FACTOR, ltv=Decimal(0))
    if collateral == 0:
        return HealthResult(health_factor=Decimal(0), ltv=Decimal(0))

    health_factor = min(MAX_HEALTH_FACTOR, (collateral * collateral_factor) / borrow)
    return HealthResult(health_factor=health_factor, ltv=ltv)


def weighted_collateral_factor(positions: Iterable[CollateralPosition]) -> Decimal:
    """
    Collateral-weighted liquidation threshold across positions.

    factor = Σ(value_i × threshold_i) / Σ(value_i)

    Falls back to the flat default when there is no collateral.
    """
    total_value = Decimal(0)
    weighted = Decimal(0)
    for p in positions:
        total_value += p.value_usd
        weighted += p.value_usd * p.liquidation_threshold
    if total_value == 0:
        return DEFAULT_COLLATERAL_FACTOR
    return weighted / total_value


def classify(
    health_factor: Decimal, thresholds: RiskThresholds = DEFAULT_RISK_THRESHOLDS
) -> RiskLevel:
    """Map a health factor to its risk tier; boundaries belong to the more severe tier."""
    if health_factor <= thresholds.liquidatable:
        return RiskLevel.LIQUIDATABLE
    if health_factor <= LIQUIDATION_ACTION_THRESHOLD:
        # critical
        return RiskLevel.DANGER
    if health_factor <= thresholds.danger:
        # caution
        return RiskLevel.DANGER
    if health_factor <= thresholds.moderate:
        return RiskLevel.MODERATE
    return RiskLevel.SAFE


def risk_badge(health_factor: Decimal) -> RiskBadge:
    """Badge for the queue table. Uses its own cut-offs, not the tier table."""
    if health_factor <= Decimal("1.0"):
        return RiskBadge.CRITICAL
    if health_factor <= Decimal("1.1"):
        return RiskBadge.HIGH
    if health_factor <= Decimal("1.5"):
        return RiskBadge.MODERATE
    return RiskBadge.SAFE


def can_liquidate(health_factor: Decimal) -> bool:
    """True if the account can be offered for liquidation (HF <= 1.0)."""
    return health_factor <= LIQUIDATION_ACTION_THRESHOLD
