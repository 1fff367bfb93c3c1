"""Async SQLAlchemy engine and session factory.

Learn: SQLAlchemy 2.0 async mode — create_async_engine for connection pooling,
AsyncSession for per-request database access, dependency injection via FastAPI.

Each request gets its own session and therefore its own transaction. The
access core never caches ownership or membership across requests; every
decision re-reads the store through this session.
"""

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from projectx.config import settings


def _engine_options(url: str) -> dict:
    """Pool sizing only applies to server databases, not SQLite."""
    if url.startswith("sqlite"):
        return {}
    # Connection pool: min 5, max 20 connections.
    return {"pool_size": 5, "max_overflow": 15, "pool_pre_ping": True}


# echo=True in dev to see SQL queries.
engine = create_async_engine(
    settings.database_url,
    echo=settings.debug,
    **_engine_options(settings.database_url),
)

# Session factory: each request gets its own session.
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db() -> AsyncSession:
    """FastAPI dependency — yields a session per request, auto-closes."""
    async with async_session_factory() as session:
        try:
            yield session
        finally:
            await session.close()
