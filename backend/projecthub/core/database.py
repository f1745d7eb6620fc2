"""Async SQLAlchemy engine and session factory.

The tables belong to the database, not to this application, so there are no
ORM models: services run Core text() statements against the live schema.
"""

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from projecthub.core.config import settings

engine = create_async_engine(
    settings.database.database_url,
    echo=settings.database.database_echo,
    pool_size=settings.database.database_pool_size,
    max_overflow=settings.database.database_max_overflow,
    pool_pre_ping=True,
    # asyncpg: shows up in pg_stat_activity
    connect_args={"server_settings": {"application_name": "projecthub"}},
)

async_session = async_sessionmaker(engine, expire_on_commit=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield a session; anything left uncommitted is rolled back on close."""
    async with async_session() as session:
        yield session
