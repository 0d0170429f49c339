"""
Database connection and session management
"""
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import NullPool
from typing import AsyncGenerator

from netatrack.core.config import settings

# Only echo SQL in development when explicitly at DEBUG
_echo_sql = settings.ENVIRONMENT == "development" and settings.LOG_LEVEL.upper() == "DEBUG"

_engine_kwargs = {
    "echo": _echo_sql,
    "future": True,
    "pool_pre_ping": True,
}
# sqlite (tests, local tooling) opens a fresh connection per checkout
if settings.DATABASE_URL.startswith("sqlite"):
    _engine_kwargs.update(poolclass=NullPool)
else:
    _engine_kwargs.update(pool_size=20, max_overflow=40)

# Create async engine
engine = create_async_engine(settings.DATABASE_URL, **_engine_kwargs)

# Create async session factory
async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False
)

# Base class for models
Base = declarative_base()


async def init_db():
    """Check the connection and optionally create tables."""
    # Import models so every table is registered on Base.metadata
    import netatrack.models  # noqa: F401

    async with engine.begin() as conn:
        if settings.AUTO_CREATE_TABLES:
            await conn.run_sync(Base.metadata.create_all)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency for getting database session

    Usage in FastAPI:
        @router.get("/politicians")
        async def list_politicians(db: AsyncSession = Depends(get_db)):
            ...
    """
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
