"""
Liquidation queue refresh.

Each refresh fetches the current round, then every UserHealth event inside the
round window, and rebuilds the queue from scratch. Refreshes are numbered; a
refresh that finishes after a newer one has already been committed is dropped.
"""

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable

from sqlalchemy.exc import SQLAlchemyError

from services.api.src.dorkfi.adapters.algorand.config import NetworkConfig, NetworksConfig
from services.api.src.dorkfi.adapters.algorand.fetcher import AlgorandFetcher, FetchError
from services.api.src.dorkfi.config import settings
from services.api.src.dorkfi.db.user_health_repository import UserHealthRepository
from services.api.src.dorkfi.domain.decoder import DecodeError, decode_user_health_events
from services.api.src.dorkfi.domain.health_factor import (
    DEFAULT_COLLATERAL_FACTOR,
    DEFAULT_RISK_THRESHOLDS,
    reduce_latest,
)
from services.api.src.dorkfi.domain.models import LiquidationAccount, RiskThresholds
from services.api.src.dorkfi.domain.queue import build_queue

logger = logging.getLogger(__name__)

DEFAULT_ROUND_WINDOW = 2_000_000

STATUS_OK = "ok"
STATUS_STALE = "stale"
STATUS_FAILED = "failed"


def compute_min_round(current_round: int, round_window: int = DEFAULT_ROUND_WINDOW) -> int:
    return max(0, current_round - round_window)


@dataclass
class RefreshResult:
    status: str
    generation: int
    current_round: int | None = None
    min_round: int | None = None
    events_fetched: int = 0
    events_stored: int = 0
    accounts: int = 0
    error: str | None = None


class LiquidationQueueService:
    """Holds the latest liquidation queue for one network."""

    def __init__(
        self,
        network: NetworkConfig,
        fetcher: AlgorandFetcher,
        collateral_factor: Decimal = DEFAULT_COLLATERAL_FACTOR,
        thresholds: RiskThresholds = DEFAULT_RISK_THRESHOLDS,
        round_window: int = DEFAULT_ROUND_WINDOW,
        repository: UserHealthRepository | None = None,
    ):
        self.network = network
        self.app_id = network.primary_lending_pool
        self.fetcher = fetcher
        self.collateral_factor = collateral_factor
        self.thresholds = thresholds
        self.round_window = round_window
        self.repository = repository

        self._lock = threading.Lock()
        self._issued_generation = 0
        self._committed_generation = 0
        self._accounts: tuple[LiquidationAccount, ...] = ()
        self.last_refreshed_at: datetime | None = None
        self.last_error: str | None = None

    @property
    def accounts(self) -> list[LiquidationAccount]:
        """Current queue, lowest health factor first."""
        with self._lock:
            return list(self._accounts)

    def get_account(self, address: str) -> LiquidationAccount | None:
        for account in self.accounts:
            if account.wallet_address == address:
                return account
        return None

    def refresh(self, since_round: int | None = None) -> RefreshResult:
        """
        Fetch, decode and rebuild the queue once. Failures keep the previous queue.

        Args:
            since_round: Optional lower bound inside the round window, e.g. the last
                stored round. The rebuilt queue then only covers users with events
                from that round on.
        """
        with self._lock:
            self._issued_generation += 1
            generation = self._issued_generation

        network_id = self.network.network_id
        logger.info(f"Refresh {generation} for {network_id} started")

        current_round = None
        min_round = None
        try:
            current_round = self.fetcher.get_current_round()
            min_round = compute_min_round(current_round, self.round_window)
            if since_round is not None:
                min_round = max(min_round, since_round)
            raw_events = self.fetcher.fetch_user_health_events(self.app_id, min_round)
            events = decode_user_health_events(raw_events)
        except (FetchError, DecodeError) as e:
            logger.error(f"Refresh {generation} for {network_id} failed: {e}")
            with self._lock:
                if generation > self._committed_generation:
                    self.last_error = str(e)
            return RefreshResult(
                status=STATUS_FAILED,
                generation=generation,
                current_round=current_round,
                min_round=min_round,
                error=str(e),
            )

        accounts = build_queue(
            reduce_latest(events), self.collateral_factor, self.thresholds
        )

        stored = 0
        if self.repository is not None:
            try:
                stored = self.repository.insert_events(network_id, events)
            except SQLAlchemyError as e:
                logger.error(f"Storing UserHealth events for {network_id} failed: {e}")

        result = RefreshResult(
            status=STATUS_OK,
            generation=generation,
            current_round=current_round,
            min_round=min_round,
            events_fetched=len(events),
            events_stored=stored,
            accounts=len(accounts),
        )

        with self._lock:
            if generation < self._committed_generation:
                logger.warning(
                    f"Refresh {generation} for {network_id} superseded by "
                    f"{self._committed_generation}, discarding"
                )
                result.status = STATUS_STALE
                return result

            self._accounts = tuple(accounts)
            self._committed_generation = generation
            self.last_refreshed_at = datetime.now(timezone.utc)
            self.last_error = None

        logger.info(
            f"Refresh {generation} for {network_id} done: "
            f"{len(events)} events, {len(accounts)} accounts"
        )
        return result


def default_fetcher_factory(network: NetworkConfig) -> AlgorandFetcher:
    return AlgorandFetcher(
        network,
        timeout=settings.request_timeout,
        algod_token=settings.algod_token,
        indexer_token=settings.indexer_token,
    )


class QueueRegistry:
    """One LiquidationQueueService per network, created on first use."""

    def __init__(
        self,
        config: NetworksConfig,
        fetcher_factory: Callable[[NetworkConfig], AlgorandFetcher] = default_fetcher_factory,
        repository: UserHealthRepository | None = None,
        collateral_factor: Decimal = DEFAULT_COLLATERAL_FACTOR,
        thresholds: RiskThresholds = DEFAULT_RISK_THRESHOLDS,
        round_window: int = DEFAULT_ROUND_WINDOW,
    ):
        self.config = config
        self.fetcher_factory = fetcher_factory
        self.repository = repository
        self.collateral_factor = collateral_factor
        self.thresholds = thresholds
        self.round_window = round_window
        self._services: dict[str, LiquidationQueueService] = {}
        self._lock = threading.Lock()

    def get(self, network_id: str) -> LiquidationQueueService:
        """
        Raises:
            UnknownNetworkError: If the network is not configured.
            MissingLendingPoolError: If the network has no lending pool.
        """
        with self._lock:
            if network_id not in self._services:
                network = self.config.require_network(network_id)
                self._services[network_id] = LiquidationQueueService(
                    network,
                    self.fetcher_factory(network),
                    collateral_factor=self.collateral_factor,
                    thresholds=self.thresholds,
                    round_window=self.round_window,
                    repository=self.repository,
                )
            return self._services[network_id]
