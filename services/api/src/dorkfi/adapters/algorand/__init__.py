from services.api.src.dorkfi.adapters.algorand.config import (
    MissingLendingPoolError,
    NetworkConfig,
    NetworksConfig,
    UnknownNetworkError,
    get_default_config,
)
from services.api.src.dorkfi.adapters.algorand.fetcher import AlgorandFetcher, FetchError

__all__ = [
    "AlgorandFetcher",
    "FetchError",
    "MissingLendingPoolError",
    "NetworkConfig",
    "NetworksConfig",
    "UnknownNetworkError",
    "get_default_config",
]
