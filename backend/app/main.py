"""FastAPI application entrypoint."""

from __future__ import annotations

import logging
from datetime import datetime
from zoneinfo import ZoneInfo

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.routes import api_router
from app.config import AppSettings, get_settings
from app.core.logging import setup_logging
from app.core.telemetry import setup_telemetry

logger = logging.getLogger(__name__)


def create_app(settings: AppSettings | None = None) -> FastAPI:
    """Build the service and attach routes for ``settings``."""

    settings = settings or get_settings()
    setup_logging(settings.log_level)
    application = FastAPI(title=settings.app_name, version="0.1.0")
    setup_telemetry(application, settings)

    application.add_middleware(
        CORSMiddleware,
        allow_origin_regex=r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$",
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["traceparent", "tracestate", "x-request-id"],
    )

    @application.get("/health", tags=["health"])
    async def health() -> dict[str, str]:
        """Return service readiness metadata."""

        return {
            "status": "ok",
            "timestamp": datetime.now(ZoneInfo(settings.timezone)).isoformat(),
            "timezone": settings.timezone,
            "overdraftPolicy": settings.overdraft_policy.value,
        }

    application.include_router(api_router, prefix=settings.api_prefix)
    logger.debug("Application configured: %s", settings.dict_for_logging())
    return application


app = create_app()

__all__ = ["app", "create_app"]
