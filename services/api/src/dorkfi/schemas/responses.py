from datetime import datetime

from pydantic import BaseModel

from services.api.src.dorkfi.domain.models import RiskBadge, RiskLevel


class NetworkResponse(BaseModel):
    network_id: str
    name: str
    explorer_url: str
    lending_pool_ids: list[int]
    enabled: bool


class LiquidationAccountResponse(BaseModel):
    """One account in the liquidation queue."""

    id: str
    wallet_address: str
    health_factor: float
    liquidation_margin: float
    total_supplied: float
    total_borrowed: float
    ltv: float
    risk_level: RiskLevel
    last_updated: str
    # Presentation fields; these use their own cut-offs (see risk_badge / can_liquidate)
    badge: RiskBadge
    can_liquidate: bool


class QueuePageResponse(BaseModel):
    network_id: str
    accounts: list[LiquidationAccountResponse]
    current_page: int
    total_pages: int
    total_items: int
    page_size: int
    last_refreshed_at: datetime | None = None
    last_error: str | None = None


class RiskBucketResponse(BaseModel):
    name: str
    value: int
    percentage: float


class LiquidationStatsResponse(BaseModel):
    network_id: str
    total_accounts: int
    liquidatable_accounts: int
    danger_zone_accounts: int
    moderate_risk_accounts: int
    safe_accounts: int
    at_risk_wallets: int
    total_value_at_risk: float
    average_health_factor: float
    risk_distribution: list[RiskBucketResponse]


class SyncResponse(BaseModel):
    network_id: str
    status: str  # "ok", "stale" or "failed"
    generation: int
    current_round: int | None = None
    min_round: int | None = None
    events_fetched: int
    events_stored: int
    accounts: int
    error: str | None = None


class TrendPointResponse(BaseModel):
    timestamp_hour: datetime
    average_health_factor: float
    event_count: int


class HealthRangeResponse(BaseModel):
    label: str
    count: int


class PositionSizeBucketResponse(BaseModel):
    label: str
    users: int
    total_collateral: float
    total_borrow: float
