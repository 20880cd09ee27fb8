import httpx
import pytest
from sqlalchemy import func, select

from learnhub.core.config import settings
from learnhub.core.exceptions import BadGatewayError
from learnhub.models.provider import Provider, ProviderToken
from learnhub.models.session import Session
from learnhub.models.user import User
from learnhub.schemas.enums import ProviderTypeName, RoleName
from learnhub.services import auth_service, token_service

pytestmark = pytest.mark.anyio

UA = "Mozilla/5.0 pytest"


async def _count(db, model) -> int:
    return (await db.execute(select(func.count()).select_from(model))).scalar_one()


async def _login(db, provider_token: str = "ya-token-1", provider_user_id: str = "yandex-42", user_agent: str = UA):
    return await auth_service.authenticate_provider_user(
        db,
        provider_token=provider_token,
        provider_user_id=provider_user_id,
        provider_type_name=ProviderTypeName.YANDEX,
        user_agent=user_agent,
    )


async def test_first_login_creates_user_provider_and_session(db_session):
    tokens = await _login(db_session)

    assert await _count(db_session, User) == 1
    assert await _count(db_session, Provider) == 1
    assert await _count(db_session, Session) == 1

    user = (await db_session.execute(select(User))).scalar_one()
    assert user.role.name == RoleName.USER.value
    session = (await db_session.execute(select(Session))).scalar_one()
    assert session.refresh_token_id == tokens.token_id


async def test_replayed_callback_does_not_open_second_session(db_session):
    await _login(db_session)
    await _login(db_session)

    assert await _count(db_session, User) == 1
    assert await _count(db_session, Provider) == 1
    assert await _count(db_session, ProviderToken) == 1
    assert await _count(db_session, Session) == 1


async def test_new_provider_token_same_agent_moves_refresh_token(db_session):
    first = await _login(db_session, provider_token="ya-token-1")
    second = await _login(db_session, provider_token="ya-token-2")

    # one refresh-token row per (user, user agent); only the newest login points at it
    assert second.token_id == first.token_id
    pointers = (await db_session.execute(
        select(Session.refresh_token_id).order_by(Session.id)
    )).scalars().all()
    assert pointers == [None, second.token_id]


async def test_login_tokens_can_be_refreshed(db_session):
    tokens = await _login(db_session)

    refreshed = await token_service.refresh_tokens(db_session, refresh_token=tokens.refresh_token, user_agent=UA)

    session = (await db_session.execute(select(Session))).scalar_one()
    assert session.refresh_token_id == refreshed.token_id


async def test_logout_deletes_refresh_token_and_detaches_session(db_session):
    tokens = await _login(db_session)

    await auth_service.logout(db_session, refresh_token=tokens.refresh_token)

    session = (await db_session.execute(select(Session))).scalar_one()
    await db_session.refresh(session)
    assert session.refresh_token_id is None
    await auth_service.logout(db_session, refresh_token=tokens.refresh_token)


async def test_authorize_url_carries_client_and_callback():
    url = httpx.URL(auth_service.yandex_authorize_url(state="xyz"))

    assert url.params["client_id"] == settings.YANDEX_APP_ID
    assert url.params["redirect_uri"] == settings.YANDEX_APP_CALLBACK
    assert url.params["response_type"] == "code"
    assert url.params["state"] == "xyz"


async def test_yandex_user_id_lookup():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.headers["Authorization"] == "OAuth ya-token"
        assert request.url.params["format"] == "json"
        return httpx.Response(200, json={"id": 1234567, "login": "someone"})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        assert await auth_service.get_user_id_from_yandex("ya-token", client=client) == "1234567"


async def test_yandex_user_info_without_id_is_bad_gateway():
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"login": "someone"}))

    async with httpx.AsyncClient(transport=transport) as client:
        with pytest.raises(BadGatewayError):
            await auth_service.get_user_id_from_yandex("ya-token", client=client)


async def test_yandex_http_error_is_bad_gateway():
    transport = httpx.MockTransport(lambda request: httpx.Response(401, json={"error": "invalid_token"}))

    async with httpx.AsyncClient(transport=transport) as client:
        with pytest.raises(BadGatewayError):
            await auth_service.get_user_id_from_yandex("ya-token", client=client)


async def test_code_exchange_posts_client_credentials():
    def handler(request: httpx.Request) -> httpx.Response:
        form = dict(httpx.QueryParams(request.content.decode()))
        assert form["grant_type"] == "authorization_code"
        assert form["code"] == "the-code"
        assert form["client_secret"] == settings.YANDEX_APP_SECRET
        return httpx.Response(200, json={"access_token": "ya-access", "token_type": "bearer"})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        assert await auth_service.exchange_yandex_code("the-code", client=client) == "ya-access"
