from fastapi import APIRouter

from services.api.src.dorkfi.routes.liquidations import router as liquidations_router
from services.api.src.dorkfi.routes.networks import router as networks_router
from services.api.src.dorkfi.routes.user_health import router as user_health_router

api_router = APIRouter(prefix="/api")
api_router.include_router(networks_router)
api_router.include_router(liquidations_router)
api_router.include_router(user_health_router)

__all__ = ["api_router"]
