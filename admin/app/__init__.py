"""
Krevv marketplace panel.

`create_app()` builds the FastAPI application that fronts the external
marketplace backend: payout tracking, comment moderation and chat lists.
"""
from __future__ import annotations

import logging
import time

from fastapi import FastAPI, Request

from admin.app.routers import api_router
from core.logging_setup import configure_logging

logger = logging.getLogger("admin")


def create_app() -> FastAPI:
    """Create and configure the FastAPI panel application."""
    configure_logging()

    app = FastAPI(
        title="Krevv Panel",
        description="Панель выплат, комментариев и чатов маркетплейса Krevv",
        version="1.0.0",
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = int((time.perf_counter() - start) * 1000)
        logger.info(
            f"Handled {request.method} {request.url.path}",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status": response.status_code,
                "took_ms": elapsed_ms,
            },
        )
        return response

    app.include_router(api_router)

    return app
