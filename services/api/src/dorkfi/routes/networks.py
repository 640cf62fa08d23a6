from fastapi import APIRouter, Depends

from services.api.src.dorkfi.adapters.algorand.config import NetworksConfig
from services.api.src.dorkfi.routes.dependencies import get_networks_config
from services.api.src.dorkfi.schemas.responses import NetworkResponse

router = APIRouter(prefix="/networks", tags=["networks"])


@router.get("", response_model=list[NetworkResponse])
def list_networks(
    config: NetworksConfig = Depends(get_networks_config),
) -> list[NetworkResponse]:
    return [
        NetworkResponse(
            network_id=n.network_id,
            name=n.name,
            explorer_url=n.explorer_url,
            lending_pool_ids=n.lending_pool_ids,
            enabled=n.network_id in config.enabled_networks,
        )
        for n in config.networks
    ]
