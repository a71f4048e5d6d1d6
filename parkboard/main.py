"""
FastAPI app entrypoint.
"""
from __future__ import annotations

import logging

from fastapi import FastAPI

from parkboard.api.router import api_router
from parkboard.core.config import get_settings
from parkboard.core.rate_limit import InMemoryCounter, RateLimiter

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(title=settings.app_name)
    app.state.rate_limiter = RateLimiter(
        InMemoryCounter(),
        max_attempts=settings.rate_limit_max_attempts,
        window_seconds=settings.rate_limit_window_seconds,
        enabled=settings.rate_limit_enabled,
    )
    app.include_router(api_router, prefix=settings.api_prefix)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    logger.info("%s started (environment=%s)", settings.app_name, settings.environment)
    return app


app = create_app()
