# learnhub/db/initial_data.py
import asyncio
import os
from loguru import logger

from learnhub.db.base import Base
from learnhub.db.session import get_async_engine, get_session_local, dispose_engine
from learnhub.crud.crud_refresh_token import prune_expired_tokens
from learnhub.crud.crud_role import seed_reference_data

# Every model must be imported so Base.metadata knows its table
import learnhub.models  # noqa F401


async def init_db(drop_existing: bool = False) -> None:
    """Creates missing tables and seeds roles and provider types."""
    engine = get_async_engine()
    async with engine.begin() as conn:
        if drop_existing:
            logger.warning("Dropping all existing tables...")
            await conn.run_sync(Base.metadata.drop_all)
        logger.info("Creating tables defined by the models...")
        await conn.run_sync(Base.metadata.create_all)

    SessionLocal = get_session_local()
    async with SessionLocal() as db:
        await seed_reference_data(db)
        pruned = await prune_expired_tokens(db)
        if pruned:
            logger.info(f"Removed {pruned} expired refresh tokens")
    logger.info("Database initialization finished.")


async def main() -> None:
    try:
        await init_db(drop_existing=os.getenv("LEARNHUB_DROP_ALL") == "1")
    finally:
        await dispose_engine()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except Exception:
        logger.exception("Database initialization failed")
        raise
