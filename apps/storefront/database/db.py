"""
Async engine, session factory and declarative base for the storefront.

The database is the hosted provider's Postgres instance, reached directly with
asyncpg. Connection and pool settings come from the environment:

    DATABASE_URL         full SQLAlchemy URL; otherwise built from POSTGRES_*
    SQL_ECHO             "true" logs every statement
    DB_POOL_SIZE         persistent connections kept open (default 10)
    DB_MAX_OVERFLOW      extra connections allowed under load (default 20)
    DB_POOL_TIMEOUT      seconds to wait for a free connection (default 30)
    DB_POOL_RECYCLE      seconds before a connection is replaced (default 1800)
"""

import logging
import os
from typing import Any, AsyncGenerator, Dict
from sqlalchemy.ext.asyncio import (
    create_async_engine,
    AsyncSession,
    async_sessionmaker,
    AsyncEngine
)
from sqlalchemy.orm import DeclarativeBase
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)


def database_url() -> str:
    """Return the asyncpg URL: ``DATABASE_URL`` or one assembled from POSTGRES_* parts."""
    url = os.getenv("DATABASE_URL")
    if url:
        return url
    user = os.getenv("POSTGRES_USER", "storefront")
    password = os.getenv("POSTGRES_PASSWORD", "storefront")
    host = os.getenv("POSTGRES_HOST", "localhost")
    port = os.getenv("POSTGRES_PORT", "5432")
    name = os.getenv("POSTGRES_DB", "storefront")
    return f"postgresql+asyncpg://{user}:{password}@{host}:{port}/{name}"


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Ignoring non-integer %s=%r, using %d", name, raw, default)
        return default
    if value < 0:
        logger.warning("Ignoring negative %s=%d, using %d", name, value, default)
        return default
    return value


def engine_options() -> Dict[str, Any]:
    """Keyword arguments for ``create_async_engine``, read from the environment."""
    return {
        "echo": os.getenv("SQL_ECHO", "false").lower() == "true",
        "future": True,
        "pool_pre_ping": True,
        "pool_size": _int_env("DB_POOL_SIZE", 10),
        "max_overflow": _int_env("DB_MAX_OVERFLOW", 20),
        "pool_timeout": _int_env("DB_POOL_TIMEOUT", 30),
        "pool_recycle": _int_env("DB_POOL_RECYCLE", 1800),
    }


DATABASE_URL = database_url()

engine: AsyncEngine = create_async_engine(DATABASE_URL, **engine_options())

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


class Base(DeclarativeBase):
    """Declarative base for the catalog models."""


# Registers the models on Base.metadata; must follow the Base definition
from storefront.database import models  # noqa: F401, E402


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency yielding a session.

    Commits when the request handler returns normally, rolls back when it
    raises. Services that commit themselves leave nothing pending here.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_database():
    """Create any missing tables (migrations remain the source of truth)."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all, checkfirst=True)
