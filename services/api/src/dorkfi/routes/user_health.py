"""UserHealth event history API routes."""

from fastapi import APIRouter, Depends, HTTPException, Query

from services.api.src.dorkfi.adapters.algorand.config import NetworksConfig
from services.api.src.dorkfi.db.user_health_repository import UserHealthRepository
from services.api.src.dorkfi.domain.health_factor import reduce_latest
from services.api.src.dorkfi.domain.history import (
    health_distribution,
    hourly_trend,
    position_size_buckets,
)
from services.api.src.dorkfi.domain.models import UserHealthEvent
from services.api.src.dorkfi.routes.dependencies import (
    get_networks_config,
    get_user_health_repository,
)
from services.api.src.dorkfi.schemas.responses import (
    HealthRangeResponse,
    PositionSizeBucketResponse,
    TrendPointResponse,
)

router = APIRouter(prefix="/user-health", tags=["user-health"])


def _load_events(
    network_id: str,
    min_round: int,
    config: NetworksConfig,
    repository: UserHealthRepository,
) -> list[UserHealthEvent]:
    if config.get_network(network_id) is None:
        raise HTTPException(status_code=404, detail=f"Unknown network: {network_id}")
    return repository.get_events(network_id, min_round=min_round)


@router.get("/{network_id}/trend", response_model=list[TrendPointResponse])
def get_health_trend(
    network_id: str,
    min_round: int = Query(default=0, ge=0),
    config: NetworksConfig = Depends(get_networks_config),
    repository: UserHealthRepository = Depends(get_user_health_repository),
) -> list[TrendPointResponse]:
    """Average contract-reported health factor per hour."""
    events = _load_events(network_id, min_round, config, repository)
    return [
        TrendPointResponse(
            timestamp_hour=p.timestamp_hour,
            average_health_factor=float(p.average_health_factor),
            event_count=p.event_count,
        )
        for p in hourly_trend(events)
    ]


@router.get("/{network_id}/distribution", response_model=list[HealthRangeResponse])
def get_health_distribution(
    network_id: str,
    min_round: int = Query(default=0, ge=0),
    config: NetworksConfig = Depends(get_networks_config),
    repository: UserHealthRepository = Depends(get_user_health_repository),
) -> list[HealthRangeResponse]:
    """Users per health factor range, using each user's latest event."""
    events = _load_events(network_id, min_round, config, repository)
    return [
        HealthRangeResponse(label=r.label, count=r.count)
        for r in health_distribution(reduce_latest(events))
    ]


@router.get("/{network_id}/positions", response_model=list[PositionSizeBucketResponse])
def get_position_sizes(
    network_id: str,
    min_round: int = Query(default=0, ge=0),
    config: NetworksConfig = Depends(get_networks_config),
    repository: UserHealthRepository = Depends(get_user_health_repository),
) -> list[PositionSizeBucketResponse]:
    """Users grouped by position size (collateral + borrow)."""
    events = _load_events(network_id, min_round, config, repository)
    return [
        PositionSizeBucketResponse(
            label=b.label,
            users=b.users,
            total_collateral=float(b.total_collateral),
            total_borrow=float(b.total_borrow),
        )
        for b in position_size_buckets(reduce_latest(events))
    ]
