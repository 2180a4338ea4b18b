"""FastAPI lifespan hook for the rate-limit sweeper."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from algoradar.utils.logger import get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start background sweeping for the application lifespan."""
    components = app.state.components
    components.sweeper.start()
    logger.info("Rate-limit sweeper started")
    try:
        yield
    finally:
        components.sweeper.stop()
