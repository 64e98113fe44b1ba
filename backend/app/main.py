"""
FastAPI app entrypoint.

Parking statistics and region visibility for the team restaurant vote. Daily batches (region
promotion, stats rebuild) run on the in-process scheduler unless SCHEDULER_ENABLED=false.
"""
import logging
from contextlib import asynccontextmanager
from pathlib import Path

from apscheduler.schedulers.background import BackgroundScheduler
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Load .env from backend/ before any app code
load_dotenv(Path(__file__).resolve().parent.parent / ".env")

from app.api.routes import b2b, parking
from app.config import settings
from app.core.constants import REGION_PROMOTION_JOB_ID, STATS_REBUILD_JOB_ID
from app.scheduler.region_promotion_job import run_region_promotion_job
from app.scheduler.stats_rebuild_job import run_stats_rebuild_job

logger = logging.getLogger(__name__)

_scheduler = BackgroundScheduler(timezone=settings.service_timezone)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.scheduler_enabled:
        # max_instances=1: a slow run is never overlapped by the next trigger
        _scheduler.add_job(
            run_region_promotion_job,
            "cron",
            hour=settings.region_promotion_hour,
            minute=settings.region_promotion_minute,
            id=REGION_PROMOTION_JOB_ID,
            max_instances=1,
            coalesce=True,
            replace_existing=True,
        )
        _scheduler.add_job(
            run_stats_rebuild_job,
            "cron",
            hour=settings.stats_rebuild_hour,
            minute=settings.stats_rebuild_minute,
            id=STATS_REBUILD_JOB_ID,
            max_instances=1,
            coalesce=True,
            replace_existing=True,
        )
        _scheduler.start()
        logger.info(
            "Scheduler started: region promotion at %02d:%02d, stats rebuild at %02d:%02d",
            settings.region_promotion_hour, settings.region_promotion_minute,
            settings.stats_rebuild_hour, settings.stats_rebuild_minute,
        )
    else:
        logger.info("Scheduler disabled (SCHEDULER_ENABLED=false); run scripts/ from cron instead")
    app.state.scheduler = _scheduler
    yield
    if _scheduler.running:
        _scheduler.shutdown(wait=False)


app = FastAPI(title="Babmoa Parking", version="0.1.0", lifespan=lifespan)

# CORS: dev origins + optional CORS_ORIGINS (comma-separated) for the production frontend
_cors_origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]
if settings.cors_origins:
    _cors_origins.extend(o.strip() for o in settings.cors_origins.split(",") if o.strip())
app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(parking.router, prefix="/api", tags=["parking"])
app.include_router(b2b.router, prefix="/api/b2b", tags=["b2b"])


@app.get("/", include_in_schema=False)
def root():
    """Root: point to API docs and health."""
    return {"message": "Babmoa Parking API", "docs": "/docs", "health": "/health"}


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
