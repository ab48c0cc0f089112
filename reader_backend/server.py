"""
Feed Reader API Server

FastAPI application providing endpoints for:
- Entry listing, search and counts
- Read/starred state
- Unread count payloads for real-time updates
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from . import __version__
from .config import config, state
from .database import Database
from .exceptions import register_exception_handlers
from .routes import entries_router, misc_router

logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize and cleanup application resources."""
    # Startup - skip if already initialized (e.g., by tests)
    if state.db is None:
        state.db = Database(config.DB_PATH)
        logger.info(f"Database opened at {config.DB_PATH}")

    yield


app = FastAPI(
    title="Feed Reader API",
    version=__version__,
    lifespan=lifespan
)

register_exception_handlers(app)

# Include routers
app.include_router(misc_router)
app.include_router(entries_router)
