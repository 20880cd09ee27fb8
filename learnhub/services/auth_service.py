# learnhub/services/auth_service.py
"""
OAuth login through Yandex.

A callback walks: provider token -> provider user id -> local user (found or
registered) -> provider link -> provider token row -> session -> issued tokens.
"""
from typing import Optional
from urllib.parse import urlencode
import httpx
from sqlalchemy.ext.asyncio import AsyncSession

from learnhub.core.config import settings
from learnhub.core.exceptions import BadGatewayError, InternalError
from learnhub.crud import crud_provider, crud_role, crud_session
from learnhub.crud.crud_user import user as crud_user
from learnhub.models.provider import ProviderType
from learnhub.models.user import User
from learnhub.schemas.enums import ProviderTypeName
from learnhub.services import token_service, user_service
from learnhub.services.token_service import IssuedTokens
from loguru import logger


def yandex_authorize_url(state: Optional[str] = None) -> str:
    params = {
        "response_type": "code",
        "client_id": settings.YANDEX_APP_ID,
        "redirect_uri": settings.YANDEX_APP_CALLBACK,
    }
    if state:
        params["state"] = state
    return f"{settings.YANDEX_AUTHORIZE_URL}?{urlencode(params)}"


async def exchange_yandex_code(code: str, client: Optional[httpx.AsyncClient] = None) -> str:
    """Trades an authorization code for a Yandex access token."""
    data = {
        "grant_type": "authorization_code",
        "code": code,
        "client_id": settings.YANDEX_APP_ID,
        "client_secret": settings.YANDEX_APP_SECRET,
    }
    try:
        async with _client(client) as http:
            response = await http.post(settings.YANDEX_TOKEN_URL, data=data)
            response.raise_for_status()
            payload = response.json()
    except (httpx.HTTPError, ValueError) as e:
        logger.error(f"Yandex code exchange failed: {e}")
        raise BadGatewayError("Failed to exchange the authorization code with Yandex")

    access_token = payload.get("access_token") if isinstance(payload, dict) else None
    if not access_token:
        raise BadGatewayError("No access token in Yandex response")
    return access_token


async def get_user_id_from_yandex(token: str, client: Optional[httpx.AsyncClient] = None) -> str:
    """Resolves a Yandex token to the stable Yandex user id."""
    try:
        async with _client(client) as http:
            response = await http.get(
                settings.YANDEX_USER_INFO_URL,
                params={"format": "json"},
                headers={"Authorization": f"OAuth {token}"},
            )
            response.raise_for_status()
            payload = response.json()
    except (httpx.HTTPError, ValueError) as e:
        logger.error(f"Failed to get user info from Yandex: {e}")
        raise BadGatewayError("Failed to get user info from Yandex")

    user_id = payload.get("id") if isinstance(payload, dict) else None
    if not user_id:
        raise BadGatewayError("No user id in Yandex response")
    return str(user_id)


class _client:
    """Uses the given client as is, or opens (and closes) a short-lived one."""

    def __init__(self, client: Optional[httpx.AsyncClient]):
        self._given = client
        self._owned: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> httpx.AsyncClient:
        if self._given is not None:
            return self._given
        self._owned = httpx.AsyncClient(timeout=settings.OAUTH_HTTP_TIMEOUT_SECONDS)
        return self._owned

    async def __aexit__(self, *exc_info) -> None:
        if self._owned is not None:
            await self._owned.aclose()


async def _provider_type(db: AsyncSession, name: ProviderTypeName) -> ProviderType:
    provider_type = await crud_role.get_provider_type_by_name(db, name=name)
    if provider_type is None:
        raise InternalError(f"Provider type {name.value} is not seeded")
    return provider_type


async def register_user(db: AsyncSession, *, provider_user_id: str, provider_type: ProviderType) -> User:
    """Creates a USER and its provider link in one transaction."""
    db_user = await user_service.create_user(db, commit=False)
    await crud_provider.create(
        db,
        user_id=db_user.id,
        provider_user_id=provider_user_id,
        provider_type_id=provider_type.id,
        commit=False,
    )
    await db.commit()
    await db.refresh(db_user)
    logger.info(f"Registered user {db_user.id} for {provider_type.name} identity")
    return db_user


async def authenticate_provider_user(
    db: AsyncSession,
    *,
    provider_token: str,
    provider_user_id: str,
    provider_type_name: ProviderTypeName,
    user_agent: str,
) -> IssuedTokens:
    provider_type = await _provider_type(db, provider_type_name)

    provider = await crud_provider.get_by_external_id(
        db, provider_user_id=provider_user_id, provider_type_id=provider_type.id
    )
    if provider is None:
        db_user = await register_user(db, provider_user_id=provider_user_id, provider_type=provider_type)
        provider = await crud_provider.get_by_user(db, user_id=db_user.id, provider_type_id=provider_type.id)
    else:
        db_user = await crud_user.get(db, id=provider.user_id)
    if db_user is None or provider is None:
        raise InternalError(f"Authorization error via {provider_type.name}")

    db_provider_token = await crud_provider.get_provider_token(db, provider_token=provider_token)
    if db_provider_token is None:
        db_provider_token = await crud_provider.create_provider_token(
            db, provider_token=provider_token, provider_id=provider.id, provider_type_id=provider_type.id
        )

    tokens = await token_service.issue_tokens(db, user=db_user, user_agent=user_agent)

    # exactly one session per provider token, even when the callback is replayed
    db_session, created = await crud_session.bind(
        db, provider_token_id=db_provider_token.id, refresh_token_id=tokens.token_id
    )
    if created:
        logger.info(f"Session {db_session.id} opened for user {db_user.id}")

    return tokens


async def auth_yandex_user(db: AsyncSession, *, yandex_token: str, user_agent: str) -> IssuedTokens:
    yandex_user_id = await get_user_id_from_yandex(yandex_token)
    return await authenticate_provider_user(
        db,
        provider_token=yandex_token,
        provider_user_id=yandex_user_id,
        provider_type_name=ProviderTypeName.YANDEX,
        user_agent=user_agent,
    )


async def logout(db: AsyncSession, *, refresh_token: Optional[str]) -> None:
    """Logout never fails on an unknown or missing refresh token."""
    await token_service.delete_refresh_token(db, token=refresh_token)
