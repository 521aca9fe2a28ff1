"""
Comanda — Async SQLAlchemy engine, session factory and declarative base
"""
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool

from comanda.core.config import get_settings

settings = get_settings()

_engine_kwargs = {"echo": settings.DEBUG}
if settings.DATABASE_POOL_ENABLED:
    _engine_kwargs["pool_pre_ping"] = True
else:
    _engine_kwargs["poolclass"] = NullPool

engine = create_async_engine(settings.database_url, **_engine_kwargs)
AsyncSessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


class Base(DeclarativeBase):
    pass


async def get_db():
    async with AsyncSessionLocal() as session:
        yield session
