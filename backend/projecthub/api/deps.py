"""Dependency injection for FastAPI routes.

All services and sessions are provided via Depends() from this module.
Route handlers never instantiate services directly.
"""

from collections.abc import AsyncGenerator

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from projecthub.core.config import settings
from projecthub.core.database import get_db as _get_db
from projecthub.core.redis import get_redis as _get_redis
from projecthub.services.project_store import ProjectStore
from projecthub.services.record_store import RecordStore
from projecthub.services.schema_catalog import SchemaCatalog


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Provide an async database session."""
    async for session in _get_db():
        yield session


async def get_redis():
    """Provide the Redis client, or None when enum caching is disabled."""
    if not settings.catalog.enum_cache_enabled:
        return None
    return await _get_redis()


async def get_schema_catalog(
    db: AsyncSession = Depends(get_db),
    redis=Depends(get_redis),
) -> SchemaCatalog:
    return SchemaCatalog(
        db=db,
        redis=redis,
        cache_ttl=settings.catalog.enum_cache_ttl,
    )


async def get_record_store(
    db: AsyncSession = Depends(get_db),
    catalog: SchemaCatalog = Depends(get_schema_catalog),
) -> RecordStore:
    return RecordStore(db=db, catalog=catalog, max_page_limit=settings.max_page_limit)


async def get_project_store(
    db: AsyncSession = Depends(get_db),
    catalog: SchemaCatalog = Depends(get_schema_catalog),
) -> ProjectStore:
    return ProjectStore(db=db, catalog=catalog, max_page_limit=settings.max_page_limit)
