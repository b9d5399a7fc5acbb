"""Health check endpoint with a PostgreSQL connectivity probe.

Always returns 200 so load balancers keep routing; a failed probe only shows
up as ``"database": "disconnected"``.
"""

from __future__ import annotations

import asyncio

import structlog
from fastapi import APIRouter, Request
from sqlalchemy import text

from menu_ingest.config import settings

logger = structlog.get_logger()

router = APIRouter(tags=["health"])

_CHECK_TIMEOUT = 3.0  # seconds


async def _check_database(request: Request) -> str:
    """Run SELECT 1 on the app's engine."""
    engine = request.app.state.engine

    async def _ping() -> None:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    try:
        await asyncio.wait_for(_ping(), timeout=_CHECK_TIMEOUT)
        return "connected"
    except Exception as exc:
        logger.debug("health_database_failed", error=str(exc))
        return "disconnected"


@router.get("/health")
async def health_check(request: Request) -> dict:
    return {
        "status": "ok",
        "version": request.app.version,
        "environment": settings.environment,
        "ocr_provider": settings.ocr_provider,
        "database": await _check_database(request),
    }
