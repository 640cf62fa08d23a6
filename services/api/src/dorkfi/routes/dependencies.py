"""Shared FastAPI dependencies."""

from functools import lru_cache

from services.api.src.dorkfi.adapters.algorand.config import NetworksConfig, get_default_config
from services.api.src.dorkfi.config import settings
from services.api.src.dorkfi.db.engine import get_engine
from services.api.src.dorkfi.db.user_health_repository import UserHealthRepository
from services.api.src.dorkfi.domain.models import RiskThresholds
from services.api.src.dorkfi.liquidation_queue import QueueRegistry


@lru_cache
def get_networks_config() -> NetworksConfig:
    return get_default_config()


@lru_cache
def get_user_health_repository() -> UserHealthRepository:
    return UserHealthRepository(get_engine())


@lru_cache
def get_queue_registry() -> QueueRegistry:
    repository = get_user_health_repository() if settings.enable_event_store else None
    return QueueRegistry(
        get_networks_config(),
        repository=repository,
        collateral_factor=settings.collateral_factor,
        thresholds=RiskThresholds(),
        round_window=settings.round_window,
    )
