# backend/roombook/main.py
"""
RoomBook API application.

Wires the versioned routers, the unified error envelope and the
application lifespan (table creation plus the idle-session sweeper).
"""

import asyncio
from contextlib import asynccontextmanager
import logging
from typing import AsyncGenerator

from fastapi import APIRouter, FastAPI

from .api.dependencies.services import get_session_registry
from .core.config import settings
from .core.constants import API_DESCRIPTION, API_TITLE, API_VERSION, BRAND_NAME
from .database import init_db
from .errors import register_error_handlers
from .routes import health
from .routes.v1 import availability as availability_v1, booking_sessions as booking_sessions_v1

# Configure logging
logging.basicConfig(
    level=settings.log_level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

logger = logging.getLogger(__name__)


async def _sweep_idle_sessions(interval_seconds: int) -> None:
    """Expire idle booking sessions every ``interval_seconds`` until cancelled."""
    registry = get_session_registry()
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            registry.sweep_expired()
        except Exception:
            logger.exception("Booking session sweep failed")


@asynccontextmanager
async def app_lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup/shutdown without deprecated events."""
    # Startup
    logger.info(f"{BRAND_NAME} API starting up...")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Operating timezone: {settings.operating_timezone}")

    init_db()

    sweeper = asyncio.create_task(_sweep_idle_sessions(settings.session_sweep_interval_seconds))
    try:
        yield
    finally:
        # Shutdown
        sweeper.cancel()
        try:
            await sweeper
        except asyncio.CancelledError:
            logger.debug("Session sweeper stopped")
        get_session_registry().clear()
        logger.info(f"{BRAND_NAME} API shutting down...")


app = FastAPI(
    title=API_TITLE,
    description=API_DESCRIPTION,
    version=API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=app_lifespan,
)
# Register unified error envelope handlers
register_error_handlers(app)

# Create API v1 router
api_v1 = APIRouter(prefix="/api/v1")
api_v1.include_router(booking_sessions_v1.router, prefix="/booking-sessions")
api_v1.include_router(availability_v1.router, prefix="/rooms")

# Include routers
app.include_router(api_v1)
app.include_router(health.router)
