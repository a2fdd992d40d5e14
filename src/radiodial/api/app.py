"""FastAPI application entrypoint."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from radiodial.api.routes import router
from radiodial.config import get_settings
from radiodial.logging import setup_logging
from radiodial.wiring import build_components

setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown events."""
    settings = get_settings()
    setup_logging(settings.log_level)
    logger.info("Application starting")

    components = build_components(settings)
    app.state.snapshot_reader = components.snapshot_reader
    app.state.station_service = components.station_service
    logger.info(
        "Snapshot %s has %d active stations",
        settings.snapshot_path,
        len(components.snapshot_reader.list_active()),
    )
    try:
        yield
    finally:
        await components.aclose()
        logger.info("Application shutting down")


app = FastAPI(title="Radiodial API", lifespan=lifespan)
app.include_router(router)
