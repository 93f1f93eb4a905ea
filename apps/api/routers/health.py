"""
Health check endpoints.
"""

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse
import redis.asyncio as redis
from sqlalchemy import text

from config import mail_is_configured, settings
from database import engine

router = APIRouter()
logger = logging.getLogger(__name__)


async def _database_status() -> str:
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as exc:
        logger.warning("Database health probe failed: %s", exc)
        return f"down: {exc}"
    return "up"


async def _rate_limit_backend() -> str:
    client = redis.from_url(settings.REDIS_URL)
    try:
        await client.ping()
    except Exception as exc:
        logger.info("Redis unavailable, rate limits use in-process counters: %s", exc)
        return "in_process"
    finally:
        await client.aclose()
    return "redis"


@router.get("/health")
async def health_check():
    """
    Overall service health.

    Only the database decides ``degraded``: mail and Redis both have fallbacks
    (in-app notifications and in-process rate limit counters).
    """
    database = await _database_status()
    return {
        "status": "healthy" if database == "up" else "degraded",
        "api": "up",
        "database": database,
        "rate_limit_backend": await _rate_limit_backend(),
        "mail": "configured" if mail_is_configured() else "disabled",
        "identity_provider": "configured" if (settings.IDENTITY_PROVIDER_SECRET or "").strip() else "missing",
    }


@router.get("/health/ready")
async def readiness_check():
    """Ready once sessions can be minted and the database answers."""
    missing = [
        name
        for name in ("IDENTITY_PROVIDER_SECRET", "JWT_SECRET")
        if not (getattr(settings, name) or "").strip()
    ]
    if await _database_status() != "up":
        missing.append("DATABASE")

    if missing:
        return JSONResponse(status_code=503, content={"ready": False, "missing": missing})
    return {"ready": True}


@router.get("/health/live")
async def liveness_check():
    return {"alive": True}
