"""Async SQLAlchemy engine and session management."""

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from leavedesk.config import settings


def engine_connect_args(database_url: str, lock_timeout_ms: int) -> dict:
    """Driver options for *database_url*.

    On asyncpg, row-lock waits are capped by ``lock_timeout`` so a blocked
    statement fails instead of waiting forever. ``0`` disables the cap.
    """
    if make_url(database_url).drivername != "postgresql+asyncpg":
        return {}
    if lock_timeout_ms <= 0:
        return {}
    return {"server_settings": {"lock_timeout": str(lock_timeout_ms)}}


# Async engine for FastAPI
engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.ENVIRONMENT == "development",
    pool_pre_ping=True,
    connect_args=engine_connect_args(settings.DATABASE_URL, settings.DB_LOCK_TIMEOUT_MS),
)

# Async session factory
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


async def get_db() -> AsyncSession:
    """FastAPI dependency: yield an async database session."""
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
