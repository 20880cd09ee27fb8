# learnhub/api/endpoints/auth.py
from typing import Any, List, Optional
from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger

from learnhub.api.dependencies import (
    clear_refresh_cookie, get_access_token, get_current_user, get_db, get_refresh_cookie,
    get_user_agent, set_refresh_cookie,
)
from learnhub.core.config import settings
from learnhub.core.exceptions import UnauthorizedError
from learnhub.core.limiter import limiter
from learnhub.models.user import User as UserModel
from learnhub.schemas.token import AccessTokenResponse, CheckAuthResponse, LogoutResponse, RefreshSession
from learnhub.services import auth_service, token_service

router = APIRouter()


@router.get("/yandex", status_code=status.HTTP_307_TEMPORARY_REDIRECT)
async def yandex_auth(state: Optional[str] = None) -> RedirectResponse:
    """Sends the browser to the Yandex consent page."""
    return RedirectResponse(auth_service.yandex_authorize_url(state))


@router.get("/yandex/callback")
async def yandex_auth_callback(
    code: str,
    db: AsyncSession = Depends(get_db),
    user_agent: str = Depends(get_user_agent),
) -> Response:
    """
    Completes a Yandex login: sets the refresh-token cookie and redirects to
    the frontend. Any failure answers a bare 500 and sets no cookie.
    """
    try:
        yandex_token = await auth_service.exchange_yandex_code(code)
        tokens = await auth_service.auth_yandex_user(db, yandex_token=yandex_token, user_agent=user_agent)
    except Exception as e:
        logger.error(f"Yandex callback failed: {e.__class__.__name__}: {e}")
        return Response(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)

    response = RedirectResponse(settings.FRONTEND_URL, status_code=status.HTTP_302_FOUND)
    set_refresh_cookie(response, tokens.refresh_token, tokens.expires_at)
    return response


@router.get(
    "/refresh-tokens",
    response_model=AccessTokenResponse,
    status_code=status.HTTP_201_CREATED,
    responses={401: {"description": "Missing, unknown, expired or already used refresh token"}},
)
@limiter.limit(settings.REFRESH_RATE_LIMIT)
async def refresh_tokens(
    request: Request,
    db: AsyncSession = Depends(get_db),
    refresh_token: Optional[str] = Depends(get_refresh_cookie),
    user_agent: str = Depends(get_user_agent),
) -> Any:
    """Spends the refresh-token cookie for a new access token and a new cookie."""
    if not refresh_token:
        raise UnauthorizedError()
    tokens = await token_service.refresh_tokens(db, refresh_token=refresh_token, user_agent=user_agent)

    body = AccessTokenResponse(access_token=tokens.access_token)
    response = JSONResponse(status_code=status.HTTP_201_CREATED, content=body.model_dump(by_alias=True))
    set_refresh_cookie(response, tokens.refresh_token, tokens.expires_at)
    return response


@router.get("/logout", response_model=LogoutResponse)
async def logout(
    db: AsyncSession = Depends(get_db),
    refresh_token: Optional[str] = Depends(get_refresh_cookie),
) -> Any:
    await auth_service.logout(db, refresh_token=refresh_token)
    response = JSONResponse(content=LogoutResponse().model_dump())
    clear_refresh_cookie(response)
    return response


@router.get("/check-auth", response_model=CheckAuthResponse, response_model_exclude_none=True)
async def check_auth(
    db: AsyncSession = Depends(get_db),
    access_token: Optional[str] = Depends(get_access_token),
    refresh_token: Optional[str] = Depends(get_refresh_cookie),
) -> Any:
    """
    `{"status": true}` while the access token is valid; otherwise a new access
    token minted from the refresh-token cookie.
    """
    if not access_token:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No access token provided")
    result = await token_service.check_auth(db, access_token=access_token, refresh_token=refresh_token)
    if isinstance(result, str):
        return CheckAuthResponse(status=True, access_token=result)
    return CheckAuthResponse(status=result)


@router.get("/sessions", response_model=List[RefreshSession])
async def list_sessions(
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
) -> Any:
    """Active refresh tokens of the caller, one per user agent."""
    return await token_service.list_user_refresh_tokens(db, user_id=current_user.id)


@router.delete("/sessions/{token_id}", status_code=status.HTTP_204_NO_CONTENT)
async def revoke_session(
    token_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
) -> Response:
    await token_service.delete_user_refresh_token(db, user_id=current_user.id, token_id=token_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
