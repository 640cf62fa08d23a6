from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Optional


class RiskLevel(str, Enum):
    LIQUIDATABLE = "liquidatable"
    DANGER = "danger"
    MODERATE = "moderate"
    SAFE = "safe"


class RiskBadge(str, Enum):
    """Badge shown next to an account in the liquidation queue table."""

    CRITICAL = "CRITICAL"
    HIGH = "HIGH"
    MODERATE = "MODERATE"
    SAFE = "SAFE"


@dataclass(frozen=True)
class RiskThresholds:
    # Inclusive upper bounds of each tier's health factor
    liquidatable: Decimal = Decimal("0.5")
    danger: Decimal = Decimal("1.2")
    moderate: Decimal = Decimal("1.5")


@dataclass(frozen=True)
class UserHealthEvent:
    """One UserHealth observation emitted by the lending pool."""

    timestamp: int  # unix seconds
    round: int
    user_id: str
    total_collateral_value: Decimal  # USD, descaled from 1e12
    total_borrow_value: Decimal  # USD, descaled from 1e12
    reported_health_factor: Optional[Decimal] = None  # descaled from 1e6
    tx_id: Optional[str] = None


# The latest known event for a user
UserSnapshot = UserHealthEvent


@dataclass(frozen=True)
class HealthResult:
    health_factor: Decimal
    ltv: Decimal  # percentage


@dataclass(frozen=True)
class LiquidationAccount:
    id: str
    wallet_address: str
    health_factor: Decimal
    liquidation_margin: Decimal
    total_supplied: Decimal
    total_borrowed: Decimal
    ltv: Decimal
    risk_level: RiskLevel
    last_updated: str


@dataclass
class QueuePage:
    items: list[LiquidationAccount]
    current_page: int
    total_pages: int
    total_items: int
    page_size: int


@dataclass
class RiskBucket:
    name: str
    value: int
    percentage: Decimal


@dataclass
class LiquidationStats:
    total_accounts: int
    liquidatable_accounts: int
    danger_zone_accounts: int
    moderate_risk_accounts: int
    safe_accounts: int
    at_risk_wallets: int  # HF <= 1.1
    total_value_at_risk: Decimal
    average_health_factor: Decimal
    risk_distribution: list[RiskBucket] = field(default_factory=list)
