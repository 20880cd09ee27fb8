# learnhub/crud/crud_refresh_token.py
from datetime import datetime, timezone
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import delete, update

from learnhub.core.security import hash_token
from learnhub.crud import crud_session
from learnhub.models.session import Session
from learnhub.models.token import Token
from loguru import logger


def utcnow_naive() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


async def get_by_token(db: AsyncSession, *, token: str) -> Optional[Token]:
    """Looks a refresh token up by its value (hash comparison). Expired rows are returned too."""
    stmt = select(Token).where(Token.token_hash == hash_token(token))
    result = await db.execute(stmt)
    return result.scalars().first()


async def get_for_user(db: AsyncSession, *, user_id: str, token: str) -> Optional[Token]:
    stmt = select(Token).where(Token.user_id == user_id, Token.token_hash == hash_token(token))
    result = await db.execute(stmt)
    return result.scalars().first()


async def get_by_user_and_agent(db: AsyncSession, *, user_id: str, user_agent: str) -> Optional[Token]:
    stmt = select(Token).where(Token.user_id == user_id, Token.user_agent == user_agent).order_by(Token.id)
    result = await db.execute(stmt)
    return result.scalars().first()


async def get_active_by_user(db: AsyncSession, *, user_id: str) -> List[Token]:
    stmt = (
        select(Token)
        .where(Token.user_id == user_id, Token.expires_at > utcnow_naive())
        .order_by(Token.created_at.desc(), Token.id.desc())
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def create_refresh_token(
    db: AsyncSession, *, user_id: str, token: str, user_agent: str, expires_at: datetime
) -> Token:
    db_token = Token(
        user_id=user_id,
        token_hash=hash_token(token),
        user_agent=user_agent,
        expires_at=expires_at,
    )
    db.add(db_token)
    await db.commit()
    await db.refresh(db_token)
    return db_token


async def update_value(db: AsyncSession, *, db_token: Token, token: str, expires_at: datetime) -> Token:
    """Gives an existing row a new value and expiry; the row id (and any Session link) stays."""
    db_token.token_hash = hash_token(token)
    db_token.expires_at = expires_at
    db.add(db_token)
    await db.commit()
    await db.refresh(db_token)
    return db_token


async def replace(
    db: AsyncSession, *, old: Token, token: str, expires_at: datetime
) -> Optional[Token]:
    """
    Rotates `old` into a new row in one transaction: insert the new token, move
    the Session pointer onto it, then delete the old row only if it still holds
    the value we read. Returns None (and rolls back) when another caller already
    consumed `old`.
    """
    old_id, old_hash = old.id, old.token_hash
    new_token = Token(
        user_id=old.user_id,
        token_hash=hash_token(token),
        user_agent=old.user_agent,
        expires_at=expires_at,
    )
    db.add(new_token)
    await db.flush()

    await crud_session.repoint_refresh_token(db, old_refresh_token_id=old_id, new_refresh_token_id=new_token.id)

    stmt_delete = delete(Token).where(Token.id == old_id, Token.token_hash == old_hash)
    result = await db.execute(stmt_delete)
    if result.rowcount != 1:
        await db.rollback()
        logger.warning(f"Refresh token {old_id} was already rotated by a concurrent request")
        return None

    await db.commit()
    await db.refresh(new_token)
    return new_token


async def _detach_sessions(db: AsyncSession, token_ids) -> None:
    """Clears Session pointers to tokens about to be deleted. Does not commit."""
    await db.execute(
        update(Session)
        .where(Session.refresh_token_id.in_(token_ids))
        .values(refresh_token_id=None)
    )


async def delete_by_token(db: AsyncSession, *, token: str) -> bool:
    """Deletes a refresh token by value. Returns False when nothing matched."""
    token_hash = hash_token(token)
    await _detach_sessions(db, select(Token.id).where(Token.token_hash == token_hash))
    result = await db.execute(delete(Token).where(Token.token_hash == token_hash))
    await db.commit()
    return result.rowcount > 0


async def delete_for_user(db: AsyncSession, *, token_id: int, user_id: str) -> bool:
    await _detach_sessions(db, select(Token.id).where(Token.id == token_id, Token.user_id == user_id))
    result = await db.execute(delete(Token).where(Token.id == token_id, Token.user_id == user_id))
    await db.commit()
    return result.rowcount > 0


async def prune_expired_tokens(db: AsyncSession) -> int:
    """Removes expired tokens (can be run periodically)."""
    now = utcnow_naive()
    await _detach_sessions(db, select(Token.id).where(Token.expires_at <= now))
    result = await db.execute(delete(Token).where(Token.expires_at <= now))
    await db.commit()
    return result.rowcount
