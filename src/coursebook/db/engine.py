"""Async SQLAlchemy engine and session factory.

One engine with connection pooling per process; each request gets its own
AsyncSession through the ``get_db`` dependency, which tests override.
"""

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from coursebook.config import settings


def build_engine(url: str | None = None, **kwargs) -> AsyncEngine:
    """Create an async engine for ``url`` (defaults to settings).

    Pool sizing only applies to server databases; SQLite picks its own pool.
    """
    url = url or settings.database_url
    options = {"echo": settings.debug}
    if not url.startswith("sqlite"):
        options.update(pool_size=5, max_overflow=15, pool_pre_ping=True)
    options.update(kwargs)
    return create_async_engine(url, **options)


engine = build_engine()

# Session factory: each request gets its own session.
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db() -> AsyncSession:
    """FastAPI dependency: yields a session per request, auto-closes."""
    async with async_session_factory() as session:
        try:
            yield session
        finally:
            await session.close()


async def create_schema(bind: AsyncEngine | None = None) -> None:
    """Create all tables that don't exist yet (dev and tests)."""
    from coursebook.db.models import Base

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
