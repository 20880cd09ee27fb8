# learnhub/api/dependencies.py
from datetime import datetime, timezone
from typing import Callable, Optional
from fastapi import Depends, HTTPException, Request, Response, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from learnhub.core import security
from learnhub.core.config import settings
from learnhub.db.session import get_db
from learnhub.models.token import USER_AGENT_MAX_LENGTH
from learnhub.models.user import User as UserModel
from learnhub.crud.crud_user import user as crud_user
from learnhub.schemas.enums import RoleName
from learnhub.services import role_service

__all__ = [
    "REFRESH_TOKEN", "bearer_scheme", "get_db", "get_access_token", "get_current_user",
    "get_optional_user", "require_roles", "get_user_agent", "get_refresh_cookie",
    "set_refresh_cookie", "clear_refresh_cookie",
]

# Name of the HTTP-only cookie carrying the refresh token
REFRESH_TOKEN = "refreshToken"

# auto_error=False: some routes accept anonymous callers, the rest reject below
bearer_scheme = HTTPBearer(auto_error=False, description="Access token issued by /api/auth")


def _credentials_exception() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_access_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[str]:
    if credentials is None or credentials.scheme.lower() != "bearer":
        return None
    return credentials.credentials or None


async def _user_from_token(db: AsyncSession, token: Optional[str]) -> Optional[UserModel]:
    if not token:
        return None
    payload = security.decode_access_token(token)
    if payload is None:
        return None
    return await crud_user.get(db, id=payload["id"])


async def get_current_user(
    db: AsyncSession = Depends(get_db), token: Optional[str] = Depends(get_access_token)
) -> UserModel:
    user = await _user_from_token(db, token)
    if user is None:
        raise _credentials_exception()
    if user.is_blocked:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="User is blocked")
    return user


async def get_optional_user(
    db: AsyncSession = Depends(get_db), token: Optional[str] = Depends(get_access_token)
) -> Optional[UserModel]:
    """The caller when a valid bearer token is present, otherwise None (anonymous)."""
    user = await _user_from_token(db, token)
    if user is None or user.is_blocked:
        return None
    return user


def require_roles(*roles: RoleName) -> Callable:
    """
    Dependency factory: resolves the caller's role and answers 403 unless it
    is one of `roles`.
    """
    async def _require(
        db: AsyncSession = Depends(get_db),
        current_user: UserModel = Depends(get_current_user),
    ) -> UserModel:
        if not await role_service.has_role(db, current_user, *roles):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Not enough privileges for this action",
            )
        return current_user

    return _require


async def get_user_agent(request: Request) -> str:
    # cut to the column size; issuing and refreshing see the same value
    return request.headers.get("user-agent", "")[:USER_AGENT_MAX_LENGTH]


async def get_refresh_cookie(request: Request) -> Optional[str]:
    return request.cookies.get(REFRESH_TOKEN) or None


# --- Cookie helpers ---
def set_refresh_cookie(response: Response, token: str, expires_at: datetime) -> None:
    """`expires_at` is the UTC-naive expiry stored on the token row."""
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    response.set_cookie(
        key=REFRESH_TOKEN,
        value=token,
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
        path="/",
        expires=expires_at,
    )


def clear_refresh_cookie(response: Response) -> None:
    response.delete_cookie(
        key=REFRESH_TOKEN,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
    )
