"""
Async engine and session factory.

Pool sizing only applies to server databases; SQLite (used by the test
suite) runs on its default pool.
"""

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from onboard.core.config import Settings


def create_engine(settings: Settings) -> AsyncEngine:
    if settings.DATABASE_URL.startswith("sqlite"):
        return create_async_engine(settings.DATABASE_URL, echo=settings.DEBUG)

    return create_async_engine(
        settings.DATABASE_URL,
        echo=settings.DEBUG,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_timeout=settings.DB_POOL_TIMEOUT,
        pool_recycle=settings.DB_POOL_RECYCLE,
        pool_pre_ping=True,
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
