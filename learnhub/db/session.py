# learnhub/db/session.py
from typing import AsyncGenerator, Optional
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from learnhub.core.config import settings

# Engine and session factory are created lazily, on first use
_async_engine: Optional[AsyncEngine] = None
_AsyncSessionLocal: Optional[async_sessionmaker[AsyncSession]] = None


def get_async_engine() -> AsyncEngine:
    """Creates the engine if it doesn't exist yet."""
    global _async_engine
    if _async_engine is None:
        # The URL must name an async driver:
        # "postgresql+asyncpg://...", "sqlite+aiosqlite:///..."
        db_url = settings.DATABASE_URL
        if not db_url:
            raise RuntimeError("DATABASE_URL is not set. Check the .env file and config.py")
        try:
            _async_engine = create_async_engine(
                db_url,
                pool_pre_ping=True,
                echo=False,
            )
        except Exception as e:
            raise RuntimeError(f"Could not create async engine: {e}")
    return _async_engine


def get_session_local() -> async_sessionmaker[AsyncSession]:
    """Creates the session factory if it doesn't exist yet."""
    global _AsyncSessionLocal
    if _AsyncSessionLocal is None:
        _AsyncSessionLocal = async_sessionmaker(
            bind=get_async_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
    return _AsyncSessionLocal


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    SessionLocal = get_session_local()
    async with SessionLocal() as db:
        try:
            yield db
        finally:
            await db.close()


async def dispose_engine() -> None:
    global _async_engine, _AsyncSessionLocal
    if _async_engine:
        await _async_engine.dispose()
        _async_engine = None
        _AsyncSessionLocal = None
