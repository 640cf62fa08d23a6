"""Liquidation queue API routes."""

from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query

from services.api.src.dorkfi.adapters.algorand.config import (
    MissingLendingPoolError,
    UnknownNetworkError,
)
from services.api.src.dorkfi.config import settings
from services.api.src.dorkfi.domain.health_factor import can_liquidate, risk_badge
from services.api.src.dorkfi.domain.models import LiquidationAccount
from services.api.src.dorkfi.domain.queue import (
    SORTABLE_FIELDS,
    compute_stats,
    filter_accounts,
    paginate,
    sort_accounts,
)
from services.api.src.dorkfi.liquidation_queue import LiquidationQueueService, QueueRegistry
from services.api.src.dorkfi.routes.dependencies import get_queue_registry
from services.api.src.dorkfi.schemas.responses import (
    LiquidationAccountResponse,
    LiquidationStatsResponse,
    QueuePageResponse,
    RiskBucketResponse,
    SyncResponse,
)

router = APIRouter(prefix="/liquidations", tags=["liquidations"])


def _get_service(registry: QueueRegistry, network_id: str) -> LiquidationQueueService:
    try:
        return registry.get(network_id)
    except UnknownNetworkError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except MissingLendingPoolError as e:
        raise HTTPException(status_code=409, detail=str(e))


def account_to_response(account: LiquidationAccount) -> LiquidationAccountResponse:
    """Convert LiquidationAccount to response model."""
    return LiquidationAccountResponse(
        id=account.id,
        wallet_address=account.wallet_address,
        health_factor=float(account.health_factor),
        liquidation_margin=float(account.liquidation_margin),
        total_supplied=float(account.total_supplied),
        total_borrowed=float(account.total_borrowed),
        ltv=float(account.ltv),
        risk_level=account.risk_level,
        last_updated=account.last_updated,
        badge=risk_badge(account.health_factor),
        can_liquidate=can_liquidate(account.health_factor),
    )


@router.post("/{network_id}/sync", response_model=SyncResponse)
def sync_liquidation_queue(
    network_id: str,
    registry: QueueRegistry = Depends(get_queue_registry),
) -> SyncResponse:
    """
    Re-fetch UserHealth events and rebuild the queue.

    A failed fetch leaves the previous queue in place and reports status "failed".
    """
    service = _get_service(registry, network_id)
    result = service.refresh()

    return SyncResponse(
        network_id=network_id,
        status=result.status,
        generation=result.generation,
        current_round=result.current_round,
        min_round=result.min_round,
        events_fetched=result.events_fetched,
        events_stored=result.events_stored,
        accounts=result.accounts,
        error=result.error,
    )


@router.get("/{network_id}", response_model=QueuePageResponse)
def get_liquidation_queue(
    network_id: str,
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=settings.page_size, ge=1, le=100),
    search: str | None = Query(default=None, max_length=100),
    sort_key: str = Query(default="health_factor"),
    direction: Literal["asc", "desc"] = Query(default="asc"),
    registry: QueueRegistry = Depends(get_queue_registry),
) -> QueuePageResponse:
    """One page of the queue, most at-risk accounts first by default."""
    if sort_key not in SORTABLE_FIELDS:
        raise HTTPException(status_code=400, detail=f"Unsupported sort key: {sort_key}")

    service = _get_service(registry, network_id)
    accounts = sort_accounts(filter_accounts(service.accounts, search), sort_key, direction)
    queue_page = paginate(accounts, page=page, page_size=page_size)

    return QueuePageResponse(
        network_id=network_id,
        accounts=[account_to_response(a) for a in queue_page.items],
        current_page=queue_page.current_page,
        total_pages=queue_page.total_pages,
        total_items=queue_page.total_items,
        page_size=queue_page.page_size,
        last_refreshed_at=service.last_refreshed_at,
        last_error=service.last_error,
    )


@router.get("/{network_id}/stats", response_model=LiquidationStatsResponse)
def get_liquidation_stats(
    network_id: str,
    registry: QueueRegistry = Depends(get_queue_registry),
) -> LiquidationStatsResponse:
    service = _get_service(registry, network_id)
    stats = compute_stats(service.accounts)

    return LiquidationStatsResponse(
        network_id=network_id,
        total_accounts=stats.total_accounts,
        liquidatable_accounts=stats.liquidatable_accounts,
        danger_zone_accounts=stats.danger_zone_accounts,
        moderate_risk_accounts=stats.moderate_risk_accounts,
        safe_accounts=stats.safe_accounts,
        at_risk_wallets=stats.at_risk_wallets,
        total_value_at_risk=float(stats.total_value_at_risk),
        average_health_factor=float(stats.average_health_factor),
        risk_distribution=[
            RiskBucketResponse(name=b.name, value=b.value, percentage=float(b.percentage))
            for b in stats.risk_distribution
        ],
    )


@router.get("/{network_id}/accounts/{address}", response_model=LiquidationAccountResponse)
def get_liquidation_account(
    network_id: str,
    address: str,
    registry: QueueRegistry = Depends(get_queue_registry),
) -> LiquidationAccountResponse:
    service = _get_service(registry, network_id)
    account = service.get_account(address)
    if account is None:
        raise HTTPException(status_code=404, detail=f"Account not in queue: {address}")
    return account_to_response(account)
