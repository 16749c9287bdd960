from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from .core.config import settings
from .core.log import configure_logging

from .api.routes import router as api_router
import presence_light.api.routes as routes_module

from .services.runtime import ControllerService


logger = logging.getLogger(__name__)


service: ControllerService | None = None


def get_service() -> ControllerService:
    assert service is not None
    return service


@asynccontextmanager
async def lifespan(app: FastAPI):
    global service
    service = ControllerService(settings)

    configure_logging(
        level=settings.log_level,
        log_file=settings.log_file,
        light_state=service.controller.light_state,
    )
    logger.info(
        "Starting %s (mode=%s, motion sensors=%d)",
        settings.app_name, settings.mode, len(settings.hue_motion_ids),
    )

    await service.start()

    try:
        yield
    finally:
        await service.stop()
        service = None
        logger.info("Shutdown complete")


app = FastAPI(title=settings.app_name, lifespan=lifespan)

# Make the dependency function in routes resolve to the real one
app.dependency_overrides[routes_module.get_service] = get_service

app.include_router(api_router, prefix="/api")
