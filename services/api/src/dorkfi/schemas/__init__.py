from services.api.src.dorkfi.schemas.responses import (
    HealthRangeResponse,
    LiquidationAccountResponse,
    LiquidationStatsResponse,
    NetworkResponse,
    PositionSizeBucketResponse,
    QueuePageResponse,
    RiskBucketResponse,
    SyncResponse,
    TrendPointResponse,
)

__all__ = [
    "HealthRangeResponse",
    "LiquidationAccountResponse",
    "LiquidationStatsResponse",
    "NetworkResponse",
    "PositionSizeBucketResponse",
    "QueuePageResponse",
    "RiskBucketResponse",
    "SyncResponse",
    "TrendPointResponse",
]
