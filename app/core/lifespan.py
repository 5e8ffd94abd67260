"""Application lifespan: startup and shutdown.

Wiring only: tracing on the way up, span flush and engine disposal on the
way down. No business logic here.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from app.core.config import get_settings
from app.infrastructure.persistence import database
from app.shared.telemetry.telemetry import TelemetryConfig, get_telemetry, set_telemetry

logger = logging.getLogger(__name__)


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Start tracing if TELEMETRY_ENABLED, yield, then flush spans and close the pool."""
    settings = get_settings()

    if settings.telemetry_enabled:
        telemetry = TelemetryConfig(settings)
        if telemetry.start(app, database.get_engine()):
            set_telemetry(telemetry)

    logger.info(
        "%s %s started (database: %s)",
        settings.app_name,
        settings.app_version,
        "postgres" if settings.is_postgres else "sqlite",
    )

    yield

    telemetry_instance = get_telemetry()
    if telemetry_instance is not None:
        telemetry_instance.shutdown()
        set_telemetry(None)
    await database.dispose_engine()
    logger.info("%s stopped", settings.app_name)
