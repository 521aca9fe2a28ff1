"""
Comanda — FastAPI application entrypoint
"""
import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator

from comanda.api import (
    cash_register,
    customers,
    employees,
    health,
    kitchen,
    menu,
    orders,
    reports,
    school_orders,
    school_register,
    students,
)
from comanda.core.config import get_settings
from comanda.core.redis_client import close_redis
from comanda.core.security import current_employee
from comanda.db import employee_ops
from comanda.db.database import AsyncSessionLocal, Base, engine
from comanda.middleware.auth import JWTAuthMiddleware
from comanda.middleware.idempotency import IdempotencyMiddleware

settings = get_settings()

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Create tables on startup (no migrations)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    async with AsyncSessionLocal() as db:
        await employee_ops.ensure_admin_account(db)
    logger.info("%s %s ready", settings.SERVICE_NAME, settings.SERVICE_VERSION)
    yield
    await close_redis()
    await engine.dispose()


app = FastAPI(
    title="Comanda POS",
    description="Restaurant point of sale: orders, kitchen workflow, menu, customers, school lunch channels, cash registers and tickets.",
    version=settings.SERVICE_VERSION,
    lifespan=lifespan,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url=None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Added last runs first: Auth sets request.state.user before Idempotency scopes keys by it
app.add_middleware(IdempotencyMiddleware)
app.add_middleware(JWTAuthMiddleware)

if settings.METRICS_ENABLED:
    Instrumentator().instrument(app).expose(app, endpoint="/metrics")

# Every route except health needs an active employee from the staff directory
staff_only = [Depends(current_employee)]
for module in (
    orders,
    kitchen,
    menu,
    customers,
    employees,
    cash_register,
    reports,
    students,
    school_orders,
    school_register,
):
    app.include_router(module.router, dependencies=staff_only)
app.include_router(health.router)


@app.get("/")
async def root():
    return {"service": settings.SERVICE_NAME, "version": settings.SERVICE_VERSION}
