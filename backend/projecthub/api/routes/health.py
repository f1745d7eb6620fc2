"""Health check endpoints. No authentication required.

- /api/health   — reports database connectivity, always 200
- /health/live  — liveness probe (always 200)
- /health/ready — readiness probe (checks dependencies)
"""

import asyncio
import time

import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from redis.asyncio import Redis
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from projecthub.api.deps import get_db, get_redis

router = APIRouter()
logger = structlog.stdlib.get_logger("projecthub.health")

# Per-store timeout for health checks (seconds)
_HEALTH_CHECK_TIMEOUT = 3.0


async def _check_postgresql(db: AsyncSession) -> dict:
    """Check PostgreSQL connectivity."""
    start = time.monotonic()
    try:
        await asyncio.wait_for(db.execute(text("SELECT 1")), timeout=_HEALTH_CHECK_TIMEOUT)
        elapsed = time.monotonic() - start
        return {"status": "ok", "latency_ms": round(elapsed * 1000, 2), "_healthy": True}
    except Exception as exc:
        logger.warning("readiness_check_failed", dependency="postgresql", error=str(exc))
        return {"status": "error", "detail": str(exc), "_healthy": False}


async def _check_redis(redis: Redis | None) -> dict:
    """Check Redis connectivity (optional — cache only, degraded not failing)."""
    if redis is None:
        return {"status": "disabled", "_healthy": True}
    try:
        await asyncio.wait_for(redis.ping(), timeout=_HEALTH_CHECK_TIMEOUT)  # type: ignore[misc]
        return {"status": "ok", "_healthy": True}
    except Exception as exc:
        logger.info("readiness_check_degraded", dependency="redis", error=str(exc))
        return {"status": "degraded", "detail": str(exc), "_healthy": True}


@router.get("/api/health")
async def health_check(db: AsyncSession = Depends(get_db)):
    """Report whether the database answers. Never fails itself."""
    result = await _check_postgresql(db)
    return {
        "status": "ok",
        "database": "connected" if result["_healthy"] else "disconnected",
    }


@router.get("/health/live")
async def liveness():
    """Liveness probe — process is alive."""
    return {"status": "live"}


@router.get("/health/ready")
async def readiness(
    db: AsyncSession = Depends(get_db),
    redis: Redis | None = Depends(get_redis),
):
    """Readiness probe — checks PostgreSQL and Redis concurrently."""
    results = await asyncio.gather(_check_postgresql(db), _check_redis(redis))

    names = ["postgresql", "redis"]
    checks: dict[str, dict] = {}
    healthy = True

    for name, result in zip(names, results):
        if not result.pop("_healthy", True):
            healthy = False
        checks[name] = result

    status_code = 200 if healthy else 503
    return JSONResponse(
        content={"status": "ready" if healthy else "not_ready", "checks": checks},
        status_code=status_code,
    )
