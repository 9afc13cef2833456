from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError

from booking_engine.api.router import api_router
from booking_engine.core.config import get_settings
from booking_engine.core.errors import (
    BookingEngineError,
    booking_engine_error_handler,
    request_validation_error_handler,
)

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(), format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    app = FastAPI(title=settings.app_name)
    app.add_exception_handler(BookingEngineError, booking_engine_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.include_router(api_router, prefix=settings.api_prefix)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    logger.info("%s started (%s)", settings.app_name, settings.environment)
    return app


app = create_app()
