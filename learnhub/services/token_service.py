# learnhub/services/token_service.py
"""
Access/refresh token lifecycle.

- Access tokens are short-lived JWTs carrying `{id}`.
- Refresh tokens are signed, unique values persisted as SHA-256 digests, one
  row per (user, user agent), 30 days by default.
- Every refresh rotates the stored value; a value can be spent only once.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Union
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from learnhub.core import security
from learnhub.core.exceptions import NotFoundError, UnauthorizedError
from learnhub.crud import crud_refresh_token
from learnhub.crud.crud_user import user as crud_user
from learnhub.models.token import Token
from learnhub.models.user import User
from loguru import logger


@dataclass
class IssuedTokens:
    access_token: str
    refresh_token: str
    expires_at: datetime  # UTC naive, same as the stored row
    token_id: int


def _is_expired(db_token: Token) -> bool:
    return db_token.expires_at <= crud_refresh_token.utcnow_naive()


async def issue_tokens(db: AsyncSession, *, user: User, user_agent: str) -> IssuedTokens:
    """
    Signs an access token and creates or refreshes the refresh-token row of
    (user, user agent). An existing row always gets a new value and expiry.
    """
    access_token = security.create_access_token(user.id)
    refresh_token, expires_at = security.create_refresh_token(user.id)

    db_token = await crud_refresh_token.get_by_user_and_agent(db, user_id=user.id, user_agent=user_agent)
    if db_token is None:
        db_token = await crud_refresh_token.create_refresh_token(
            db, user_id=user.id, token=refresh_token, user_agent=user_agent, expires_at=expires_at
        )
    else:
        db_token = await crud_refresh_token.update_value(
            db, db_token=db_token, token=refresh_token, expires_at=expires_at
        )
    logger.info(f"Tokens issued for user {user.id} (token row {db_token.id})")
    return IssuedTokens(
        access_token=access_token,
        refresh_token=refresh_token,
        expires_at=db_token.expires_at,
        token_id=db_token.id,
    )


async def refresh_tokens(db: AsyncSession, *, refresh_token: str, user_agent: str) -> IssuedTokens:
    """
    Spends `refresh_token` and returns a fresh pair. Unknown, expired or
    foreign-agent tokens, concurrent double use and persistence failures all
    end in UnauthorizedError. An expired row is deleted whatever the agent.
    """
    try:
        db_token = await crud_refresh_token.get_by_token(db, token=refresh_token)
        if db_token is None:
            logger.warning("Refresh attempted with an unknown token")
            raise UnauthorizedError()
        if _is_expired(db_token):
            logger.warning(f"Refresh attempted with expired token row {db_token.id}, deleting it")
            await crud_refresh_token.delete_by_token(db, token=refresh_token)
            raise UnauthorizedError()
        if db_token.user_agent != user_agent:
            logger.warning(f"Refresh attempted from a different user agent for token row {db_token.id}")
            raise UnauthorizedError()

        user = await crud_user.get(db, id=db_token.user_id)
        if user is None or user.is_blocked:
            raise UnauthorizedError()

        new_value, expires_at = security.create_refresh_token(user.id)
        new_token = await crud_refresh_token.replace(db, old=db_token, token=new_value, expires_at=expires_at)
        if new_token is None:
            raise UnauthorizedError()
    except UnauthorizedError:
        raise
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Database error while rotating a refresh token: {e.__class__.__name__}")
        raise UnauthorizedError()

    logger.info(f"Refresh token rotated for user {user.id} (row {db_token.id} -> {new_token.id})")
    return IssuedTokens(
        access_token=security.create_access_token(user.id),
        refresh_token=new_value,
        expires_at=new_token.expires_at,
        token_id=new_token.id,
    )


async def delete_refresh_token(db: AsyncSession, *, token: Optional[str], must_exist: bool = False) -> bool:
    """
    Removes a refresh token by value. An unknown value returns False, or
    raises NotFoundError when the caller needs the token to exist.
    """
    deleted = bool(token) and await crud_refresh_token.delete_by_token(db, token=token)
    if not deleted:
        if must_exist:
            raise NotFoundError("Refresh token not found")
        logger.warning("Delete requested for an unknown refresh token")
    return deleted


async def delete_user_refresh_token(db: AsyncSession, *, user_id: str, token_id: int) -> None:
    """Explicit token management: the token must exist and belong to `user_id`."""
    if not await crud_refresh_token.delete_for_user(db, token_id=token_id, user_id=user_id):
        raise NotFoundError(f"Refresh token with ID {token_id} not found")
    logger.info(f"User {user_id} revoked refresh token {token_id}")


async def list_user_refresh_tokens(db: AsyncSession, *, user_id: str) -> List[Token]:
    return await crud_refresh_token.get_active_by_user(db, user_id=user_id)


async def check_auth(
    db: AsyncSession, *, access_token: str, refresh_token: Optional[str] = None
) -> Union[bool, str]:
    """
    True when `access_token` is valid. Otherwise, when a refresh token is given,
    verifies its signature and its stored row (same subject, same value, not
    expired) and returns a newly signed access token; the refresh token is not
    rotated. Raises UnauthorizedError in every other case.
    """
    if security.decode_access_token(access_token) is not None:
        return True
    if not refresh_token:
        raise UnauthorizedError("Invalid access token")

    payload = security.decode_refresh_token(refresh_token)
    if payload is None:
        raise UnauthorizedError("Invalid refresh token")
    user_id = payload["id"]
    db_token = await crud_refresh_token.get_for_user(db, user_id=user_id, token=refresh_token)
    if db_token is None:
        raise UnauthorizedError("Invalid refresh token")
    if _is_expired(db_token):
        logger.warning(f"Expired token row {db_token.id} presented to check-auth, deleting it")
        await crud_refresh_token.delete_by_token(db, token=refresh_token)
        raise UnauthorizedError("Invalid refresh token")
    return security.create_access_token(user_id)
