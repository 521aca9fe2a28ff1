"""
Comanda — Health endpoint

Checks the database and Redis concurrently; either failing marks the
service degraded (503) so the load balancer can drain it.
"""
import asyncio

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text

from comanda.core.config import get_settings
from comanda.core.redis_client import get_redis
from comanda.db.database import engine
from comanda.schemas.common import HealthResponse

settings = get_settings()
router = APIRouter(tags=["health"])


async def _ping_database():
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))


async def _ping_redis():
    await get_redis().ping()


async def _run_check(check) -> str:
    try:
        await asyncio.wait_for(check(), timeout=settings.HEALTH_CHECK_TIMEOUT)
        return "ok"
    except Exception as e:
        return f"error: {str(e)[:100]}"


@router.get("/health", response_model=HealthResponse)
async def health_check():
    database, redis = await asyncio.gather(_run_check(_ping_database), _run_check(_ping_redis))
    deps = {"database": database, "redis": redis}
    healthy = all(state == "ok" for state in deps.values())

    body = HealthResponse(
        status="healthy" if healthy else "degraded",
        service=settings.SERVICE_NAME,
        version=settings.SERVICE_VERSION,
        dependencies=deps,
    )
    return JSONResponse(content=body.model_dump(), status_code=200 if healthy else 503)
