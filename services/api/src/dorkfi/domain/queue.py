"""Liquidation queue building, paging, sorting and statistics."""

import math
from decimal import Decimal
from typing import Iterable, Mapping, Sequence

from services.api.src.dorkfi.domain.health_factor import (
    DEFAULT_COLLATERAL_FACTOR,
    DEFAULT_RISK_THRESHOLDS,
    classify,
    compute_health,
)
from services.api.src.dorkfi.domain.models import (
    LiquidationAccount,
    LiquidationStats,
    QueuePage,
    RiskBucket,
    RiskLevel,
    RiskThresholds,
    UserSnapshot,
)

DEFAULT_PAGE_SIZE = 10

AT_RISK_HEALTH_FACTOR = Decimal("1.1")

# Tier order first, then health factor
RISK_SORT_KEY = "risk"

SORTABLE_FIELDS = (
    "health_factor",
    "liquidation_margin",
    "total_supplied",
    "total_borrowed",
    "ltv",
    "wallet_address",
    "last_updated",
    RISK_SORT_KEY,
)

RISK_ORDER = {
    RiskLevel.LIQUIDATABLE: 0,
    RiskLevel.DANGER: 1,
    RiskLevel.MODERATE: 2,
    RiskLevel.SAFE: 3,
}

RISK_BUCKET_NAMES = {
    RiskLevel.LIQUIDATABLE: "Liquidatable",
    RiskLevel.DANGER: "Danger Zone",
    RiskLevel.MODERATE: "Moderate Risk",
    RiskLevel.SAFE: "Safe Harbor",
}


def build_account(
    snapshot: UserSnapshot,
    collateral_factor: Decimal = DEFAULT_COLLATERAL_FACTOR,
    thresholds: RiskThresholds = DEFAULT_RISK_THRESHOLDS,
) -> LiquidationAccount:
    """Annotate a snapshot with health factor, margin and risk tier."""
    health = compute_health(snapshot, collateral_factor)
    margin = max(Decimal(0), (health.health_factor - 1) * 100)

    return LiquidationAccount(
        id=snapshot.user_id,
        wallet_address=snapshot.user_id,
        health_factor=health.health_factor,
        liquidation_margin=margin,
        total_supplied=snapshot.total_collateral_value,
        total_borrowed=snapshot.total_borrow_value,
        ltv=health.ltv,
        risk_level=classify(health.health_factor, thresholds),
        last_updated=str(snapshot.timestamp),
    )


def build_queue(
    snapshots: Mapping[str, UserSnapshot],
    collateral_factor: Decimal = DEFAULT_COLLATERAL_FACTOR,
    thresholds: RiskThresholds = DEFAULT_RISK_THRESHOLDS,
) -> list[LiquidationAccount]:
    """Build the queue for all snapshots, most at-risk (lowest HF) first."""
    accounts = [
        build_account(s, collateral_factor, thresholds) for s in snapshots.values()
    ]
    return sorted(accounts, key=lambda a: a.health_factor)


def paginate(
    accounts: Sequence[LiquidationAccount],
    page: int = 1,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> QueuePage:
    """Slice one page out of the queue. Out-of-range pages are clamped."""
    if page_size < 1:
        raise ValueError(f"page_size must be positive, got {page_size}")

    total_items = len(accounts)
    total_pages = math.ceil(total_items / page_size)
    current_page = max(1, min(page, total_pages))

    start = (current_page - 1) * page_size
    return QueuePage(
        items=list(accounts[start:start + page_size]),
        current_page=current_page,
        total_pages=total_pages,
        total_items=total_items,
        page_size=page_size,
    )


def filter_accounts(
    accounts: Iterable[LiquidationAccount], search: str | None
) -> list[LiquidationAccount]:
    """Keep accounts whose wallet address contains the search term (case-insensitive)."""
    if not search:
        return list(accounts)
    term = search.lower()
    return [a for a in accounts if term in a.wallet_address.lower()]


def _sort_value(account: LiquidationAccount, key: str):
    # last_updated holds a unix timestamp as a string
    if key == "last_updated":
        return int(account.last_updated)
    return getattr(account, key)


def sort_accounts(
    accounts: Iterable[LiquidationAccount],
    key: str = "health_factor",
    direction: str = "asc",
) -> list[LiquidationAccount]:
    if key not in SORTABLE_FIELDS:
        raise ValueError(f"Unsupported sort key: {key}")
    if direction not in ("asc", "desc"):
        raise ValueError(f"Unsupported sort direction: {direction}")
    if key == RISK_SORT_KEY:
        result = sort_accounts_by_risk(accounts)
        return result[::-1] if direction == "desc" else result
    return sorted(accounts, key=lambda a: _sort_value(a, key), reverse=direction == "desc")


def sort_accounts_by_risk(
    accounts: Iterable[LiquidationAccount],
) -> list[LiquidationAccount]:
    """Order by risk tier first, then by health factor within a tier."""
    return sorted(accounts, key=lambda a: (RISK_ORDER[a.risk_level], a.health_factor))


def compute_stats(accounts: Sequence[LiquidationAccount]) -> LiquidationStats:
    """Aggregate counts per risk tier plus value-at-risk and average HF."""
    total = len(accounts)
    counts = {level: 0 for level in RiskLevel}
    for account in accounts:
        counts[account.risk_level] += 1

    total_value_at_risk = sum((a.total_borrowed for a in accounts), Decimal(0))
    average_hf = (
        sum((a.health_factor for a in accounts), Decimal(0)) / total
        if total > 0
        else Decimal(0)
    )

    distribution = [
        RiskBucket(
            name=RISK_BUCKET_NAMES[level],
            value=counts[level],
            percentage=(Decimal(counts[level]) / total * 100) if total > 0 else Decimal(0),
        )
        for level in RiskLevel
    ]

    return LiquidationStats(
        total_accounts=total,
        liquidatable_accounts=counts[RiskLevel.LIQUIDATABLE],
        danger_zone_accounts=counts[RiskLevel.DANGER],
        moderate_risk_accounts=counts[RiskLevel.MODERATE],
        safe_accounts=counts[RiskLevel.SAFE],
        at_risk_wallets=sum(1 for a in accounts if a.health_factor <= AT_RISK_HEALTH_FACTOR),
        total_value_at_risk=total_value_at_risk,
        average_health_factor=average_hf,
        risk_distribution=distribution,
    )
