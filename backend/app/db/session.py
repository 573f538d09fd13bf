"""
Database session configuration.

Async SQLAlchemy engine and session factory. PostgreSQL (asyncpg) in
deployments; a SQLite URL (aiosqlite) works for local runs, in which case
the pool sizing options are not passed.
"""

from typing import Any, Dict

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from backend.app.core.config import settings


def engine_options(database_url: str) -> Dict[str, Any]:
    """Keyword arguments for ``create_async_engine`` by backend."""
    options: Dict[str, Any] = {"echo": settings.db_echo}
    if make_url(database_url).get_backend_name() == "sqlite":
        options["connect_args"] = {"check_same_thread": False}
    else:
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=True,
        )
    return options


engine = create_async_engine(settings.database_url, **engine_options(settings.database_url))

# Objects stay readable after commit; the order service re-reads explicitly
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)

Base = declarative_base()


async def get_db():
    """
    FastAPI dependency for database sessions.

    Yields one session per request. Uncommitted work is rolled back when
    the session closes.
    """
    async with AsyncSessionLocal() as session:
        yield session
