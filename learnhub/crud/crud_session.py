# learnhub/crud/crud_session.py
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import update

from learnhub.models.session import Session


async def get_by_provider_token_id(db: AsyncSession, *, provider_token_id: int) -> Optional[Session]:
    stmt = select(Session).where(Session.provider_token_id == provider_token_id)
    result = await db.execute(stmt)
    return result.scalars().first()


async def repoint_refresh_token(
    db: AsyncSession, *, old_refresh_token_id: int, new_refresh_token_id: int
) -> int:
    """Moves sessions from one refresh token to another. Does not commit."""
    stmt = (
        update(Session)
        .where(Session.refresh_token_id == old_refresh_token_id)
        .values(refresh_token_id=new_refresh_token_id)
    )
    result = await db.execute(stmt)
    return result.rowcount


async def bind(db: AsyncSession, *, provider_token_id: int, refresh_token_id: int) -> tuple[Session, bool]:
    """
    Makes the session of `provider_token_id` point at `refresh_token_id`,
    creating the session when the provider token has none yet. A session of
    an older login holding the same refresh token is detached from it.
    Returns (session, created).
    """
    await db.execute(
        update(Session)
        .where(Session.refresh_token_id == refresh_token_id, Session.provider_token_id != provider_token_id)
        .values(refresh_token_id=None)
    )
    db_session = await get_by_provider_token_id(db, provider_token_id=provider_token_id)
    created = db_session is None
    if created:
        db_session = Session(provider_token_id=provider_token_id, refresh_token_id=refresh_token_id)
    else:
        db_session.refresh_token_id = refresh_token_id
    db.add(db_session)
    await db.commit()
    await db.refresh(db_session)
    return db_session, created
