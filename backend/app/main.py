"""
FastAPI app entrypoint.

Venue search and detail (Yelp), attendance, chatter, and the per-venue realtime channel.
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

from app.api.routes import live, venues
from app.config import settings
from app.core.constants import CHATTER_PURGE_JOB_ID
from app.core.errors import register_error_handlers
from app.realtime.bus import PresenceEventBus
from app.scheduler.chatter_purge_job import run_chatter_purge_job

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.bus = PresenceEventBus()

    scheduler = BackgroundScheduler()
    scheduler.add_job(
        run_chatter_purge_job,
        "interval",
        minutes=settings.chatter_purge_interval_minutes,
        id=CHATTER_PURGE_JOB_ID,
    )
    if settings.scheduler_enabled:
        scheduler.start()
    app.state.scheduler = scheduler
    logger.info("Backend ready")
    yield
    if scheduler.running:
        scheduler.shutdown(wait=False)


app = FastAPI(title="Nightlife", version="0.1.0", lifespan=lifespan)

# CORS: dev origins + optional CORS_ORIGINS (comma-separated) for the production frontend
_cors_origins = [
    "http://localhost:4200",
    "http://127.0.0.1:4200",
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
    expose_headers=["X-Attendance"],
)

register_error_handlers(app)

app.include_router(venues.router, prefix="/api/venue", tags=["venue"])
app.include_router(live.router, tags=["live"])


@app.get("/", include_in_schema=False)
def root():
    """Root: point to API docs and health."""
    return {"message": "Nightlife API", "docs": "/docs", "health": "/health"}


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
