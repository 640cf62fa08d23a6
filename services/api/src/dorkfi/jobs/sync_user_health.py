"""
UserHealth sync job.

Fetches UserHealth events of the network's lending pool inside the round window,
stores them in the user_health_events table and logs the head of the resulting
liquidation queue.

Usage:
    python -m services.api.src.dorkfi.jobs.sync_user_health --network voi-mainnet
    python -m services.api.src.dorkfi.jobs.sync_user_health --network voi-mainnet --top 20
"""
import argparse
import logging
import sys

from sqlalchemy.exc import SQLAlchemyError

from services.api.src.dorkfi.adapters.algorand.config import get_default_config
from services.api.src.dorkfi.adapters.algorand.fetcher import AlgorandFetcher
from services.api.src.dorkfi.config import settings
from services.api.src.dorkfi.db.engine import get_engine, init_db
from services.api.src.dorkfi.db.user_health_repository import UserHealthRepository
from services.api.src.dorkfi.domain.health_factor import can_liquidate
from services.api.src.dorkfi.domain.models import LiquidationAccount
from services.api.src.dorkfi.liquidation_queue import (
    STATUS_OK,
    LiquidationQueueService,
    RefreshResult,
    default_fetcher_factory,
)

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def sync_user_health(
    network_id: str,
    round_window: int | None = None,
    database_url: str | None = None,
    fetcher: AlgorandFetcher | None = None,
    resume: bool = False,
) -> tuple[RefreshResult, list[LiquidationAccount]]:
    """
    Run one refresh for a network and persist the fetched events.

    Args:
        network_id: Network identifier (e.g., 'voi-mainnet')
        round_window: Rounds to look back from the current round (default: from settings)
        database_url: Optional database URL override
        fetcher: Optional fetcher override (default: AlgorandFetcher for the network)
        resume: Start from the last stored round instead of the whole window

    Returns:
        The refresh result and the rebuilt queue
    """
    network = get_default_config().require_network(network_id)

    engine = get_engine(database_url)
    init_db(engine)

    repository = UserHealthRepository(engine)
    since_round = repository.get_max_round(network_id) if resume else None

    service = LiquidationQueueService(
        network,
        fetcher or default_fetcher_factory(network),
        collateral_factor=settings.collateral_factor,
        round_window=round_window if round_window is not None else settings.round_window,
        repository=repository,
    )
    result = service.refresh(since_round=since_round)
    return result, service.accounts


def ingest_all_user_health(database_url: str | None = None) -> dict[str, int]:
    """
    Sync every enabled network that has a lending pool, resuming from the last
    stored round.

    Returns:
        Dict mapping network_id to count of events stored (-1 on failure)
    """
    results: dict[str, int] = {}

    for network in get_default_config().get_enabled_networks():
        if not network.lending_pool_ids:
            logger.info(f"Skipping {network.network_id}: no lending pool")
            continue
        try:
            result, _ = sync_user_health(
                network.network_id, database_url=database_url, resume=True
            )
        except (LookupError, SQLAlchemyError) as e:
            logger.error(f"Failed to sync {network.network_id}: {e}", exc_info=True)
            results[network.network_id] = -1
            continue

        results[network.network_id] = (
            result.events_stored if result.status == STATUS_OK else -1
        )

    return results


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Sync DorkFi UserHealth events and rebuild the liquidation queue"
    )
    parser.add_argument(
        "--network",
        type=str,
        default=settings.default_network,
        help="Network to sync (e.g., 'voi-mainnet')",
    )
    parser.add_argument(
        "--round-window",
        type=int,
        default=None,
        help="Rounds to look back from the current round (default: from settings)",
    )
    parser.add_argument(
        "--top",
        type=int,
        default=10,
        help="Number of most at-risk accounts to log",
    )
    parser.add_argument(
        "--database-url",
        type=str,
        default=None,
        help="Database URL (default: from settings)",
    )

    args = parser.parse_args(argv)

    try:
        result, accounts = sync_user_health(
            network_id=args.network,
            round_window=args.round_window,
            database_url=args.database_url,
        )
    except LookupError as e:
        logger.error(f"Sync failed: {e}")
        return 1

    if result.status != STATUS_OK:
        logger.error(f"Sync {result.status}: {result.error}")
        return 1

    logger.info(
        f"Sync complete: {result.events_fetched} events "
        f"({result.events_stored} new), {result.accounts} accounts"
    )
    for account in accounts[:args.top]:
        flag = " LIQUIDATE" if can_liquidate(account.health_factor) else ""
        logger.info(
            f"  {account.wallet_address} HF={account.health_factor:.4f} "
            f"LTV={account.ltv:.2f}% {account.risk_level.value}{flag}"
        )
    return 0


if __name__ == "__main__":
    sys.exit(main())
