"""
Event Generator Application

FastAPI application exposing recurring event templates and generation.
The engine (database pools and the generation scheduler) lives for the
lifetime of the app.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .config import Config
from .services.engine_service import get_engine_service, init_engine_service
from .routes import (
    health_router,
    events_router,
    recurring_events_router,
)

logging.basicConfig(
    level=logging.DEBUG if Config.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger("eventgen.app")

logging.getLogger("asyncpg").setLevel(logging.WARNING)

API_PREFIX = "/api/v1"


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Open the engine before serving requests, close it on shutdown"""
    logger.info(
        f"Starting event generator {__version__} "
        f"(scheduler={'on' if Config.SCHEDULER_ENABLED else 'off'}, cron='{Config.GENERATION_CRON}')"
    )
    try:
        await init_engine_service()
    except Exception as e:
        logger.error(f"Failed to start event generator: {e}")
        raise

    yield

    logger.info("Shutting down event generator...")
    try:
        await get_engine_service().close()
    except Exception as e:
        logger.error(f"Error during shutdown: {e}")


app = FastAPI(
    title="Event Generator API",
    description="Recurring event templates and idempotent event generation",
    version=__version__,
    lifespan=lifespan,
)

# The admin panel is served from a separate origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health_router, prefix=API_PREFIX)
app.include_router(recurring_events_router, prefix=API_PREFIX)
app.include_router(events_router, prefix=API_PREFIX)


@app.get("/")
async def root():
    """Service banner"""
    return {
        "service": "Event Generator",
        "version": __version__,
        "api": API_PREFIX,
    }
