import logging
import os
from contextlib import asynccontextmanager

from apscheduler.schedulers.background import BackgroundScheduler
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from services.api.src.dorkfi.config import settings
from services.api.src.dorkfi.routes import api_router

logger = logging.getLogger(__name__)

# Global scheduler instance
scheduler: BackgroundScheduler | None = None


def run_ingestion() -> None:
    """Store UserHealth events for every enabled network."""
    from services.api.src.dorkfi.jobs.sync_user_health import ingest_all_user_health

    logger.info("Starting UserHealth ingestion...")
    results = ingest_all_user_health()
    for network_id, count in results.items():
        if count < 0:
            logger.error(f"UserHealth ingestion failed for {network_id}")
        else:
            logger.info(f"UserHealth {network_id}: {count} events stored")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the event store tables and start the ingestion scheduler on startup."""
    global scheduler

    if settings.enable_event_store and os.getenv("INIT_DB", "true").lower() == "true":
        from services.api.src.dorkfi.db.engine import init_db
        from services.api.src.dorkfi.routes.dependencies import get_user_health_repository

        init_db(get_user_health_repository().engine)
        logger.info("UserHealth event store ready")

    # History ingestion only feeds the event store; the queue is rebuilt by manual sync
    if settings.enable_event_store and os.getenv("ENABLE_EVENT_INGESTION", "false").lower() == "true":
        logger.info("Starting ingestion scheduler (every hour at :00)")

        scheduler = BackgroundScheduler()
        scheduler.add_job(
            run_ingestion,
            "cron",
            minute=0,
            id="user_health_ingestion",
            name="DorkFi UserHealth Ingestion",
        )
        scheduler.start()

        if os.getenv("RUN_INGESTION_ON_STARTUP", "true").lower() == "true":
            logger.info("Running initial ingestion...")
            run_ingestion()

    # Initial sync of the default network so the queue is not empty on first load
    if os.getenv("SYNC_ON_STARTUP", "false").lower() == "true":
        from services.api.src.dorkfi.routes.dependencies import get_queue_registry

        result = get_queue_registry().get(settings.default_network).refresh()
        logger.info(f"Startup sync for {settings.default_network}: {result.status}")

    yield

    if scheduler is not None:
        scheduler.shutdown(wait=False)
        scheduler = None
        logger.info("Scheduler shutdown complete")


app = FastAPI(title="DorkFi Liquidation Monitor API", lifespan=lifespan)

# CORS for frontend
cors_origins = [
    "http://localhost:3000",
    "https://localhost:3000",
    "http://localhost:8080",
]

# Add custom origin from environment (e.g., the deployed app domain)
if os.getenv("CORS_ORIGIN"):
    cors_origins.append(os.getenv("CORS_ORIGIN"))

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)


@app.get("/")
def root() -> dict[str, str]:
    return {"service": "dorkfi-liquidation-monitor-api", "docs": "/docs"}


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
