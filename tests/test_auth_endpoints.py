import pytest
from http.cookies import SimpleCookie
from sqlalchemy import func, select

from learnhub.api.dependencies import REFRESH_TOKEN
from learnhub.core import security
from learnhub.core.config import settings
from learnhub.models.session import Session
from learnhub.models.token import USER_AGENT_MAX_LENGTH, Token
from learnhub.services import auth_service, token_service

pytestmark = pytest.mark.anyio

UA = "Mozilla/5.0 pytest"


def refresh_cookie_of(resp) -> SimpleCookie:
    cookie = SimpleCookie()
    for header in resp.headers.get_list("set-cookie"):
        cookie.load(header)
    return cookie


def cookie_header(value: str) -> dict:
    return {"Cookie": f"{REFRESH_TOKEN}={value}", "User-Agent": UA}


@pytest.fixture
def fake_yandex(monkeypatch):
    """Replaces both Yandex round trips; the code doubles as the provider token."""
    async def exchange(code, client=None):
        return f"ya-token-{code}"

    async def user_id(token, client=None):
        return "yandex-user-1"

    monkeypatch.setattr(auth_service, "exchange_yandex_code", exchange)
    monkeypatch.setattr(auth_service, "get_user_id_from_yandex", user_id)


async def test_yandex_login_redirects_to_consent_page(async_client):
    resp = await async_client.get("/api/auth/yandex")

    assert resp.status_code == 307
    assert resp.headers["location"].startswith(settings.YANDEX_AUTHORIZE_URL)


async def test_callback_sets_cookie_and_redirects(async_client, fake_yandex, db_session):
    resp = await async_client.get("/api/auth/yandex/callback", params={"code": "abc"}, headers={"User-Agent": UA})

    assert resp.status_code == 302
    assert resp.headers["location"] == settings.FRONTEND_URL
    morsel = refresh_cookie_of(resp)[REFRESH_TOKEN]
    assert morsel["httponly"]
    assert morsel["samesite"].lower() == "lax"
    assert morsel["path"] == "/"
    assert not morsel["secure"]
    assert security.decode_refresh_token(morsel.value) is not None
    assert (await db_session.execute(select(func.count()).select_from(Session))).scalar_one() == 1


async def test_callback_failure_is_500_without_cookie(async_client, monkeypatch):
    async def broken(code, client=None):
        raise RuntimeError("yandex is down")

    monkeypatch.setattr(auth_service, "exchange_yandex_code", broken)

    resp = await async_client.get("/api/auth/yandex/callback", params={"code": "abc"})

    assert resp.status_code == 500
    assert "set-cookie" not in resp.headers


async def test_refresh_endpoint_rotates_cookie(async_client, fake_yandex):
    login = await async_client.get("/api/auth/yandex/callback", params={"code": "abc"}, headers={"User-Agent": UA})
    old_value = refresh_cookie_of(login)[REFRESH_TOKEN].value
    async_client.cookies.clear()

    resp = await async_client.get("/api/auth/refresh-tokens", headers=cookie_header(old_value))

    assert resp.status_code == 201, resp.text
    assert security.decode_access_token(resp.json()["accessToken"]) is not None
    new_value = refresh_cookie_of(resp)[REFRESH_TOKEN].value
    assert new_value != old_value

    async_client.cookies.clear()
    replay = await async_client.get("/api/auth/refresh-tokens", headers=cookie_header(old_value))
    assert replay.status_code == 401


async def test_oversized_user_agent_is_stored_cut_and_still_refreshes(async_client, fake_yandex, db_session):
    long_agent = "Mozilla/5.0 " + "x" * 2000
    login = await async_client.get(
        "/api/auth/yandex/callback", params={"code": "abc"}, headers={"User-Agent": long_agent}
    )
    assert login.status_code == 302
    value = refresh_cookie_of(login)[REFRESH_TOKEN].value
    async_client.cookies.clear()

    stored = (await db_session.execute(select(Token.user_agent))).scalars().all()
    assert stored == [long_agent[:USER_AGENT_MAX_LENGTH]]

    resp = await async_client.get(
        "/api/auth/refresh-tokens", headers={"Cookie": f"{REFRESH_TOKEN}={value}", "User-Agent": long_agent}
    )
    assert resp.status_code == 201, resp.text


async def test_refresh_without_cookie_is_401(async_client):
    resp = await async_client.get("/api/auth/refresh-tokens")

    assert resp.status_code == 401
    assert resp.headers["www-authenticate"] == "Bearer"


async def test_refresh_from_other_browser_is_401(async_client, db_session, create_test_user):
    user = await create_test_user()
    issued = await token_service.issue_tokens(db_session, user=user, user_agent="curl/8.0")

    resp = await async_client.get("/api/auth/refresh-tokens", headers=cookie_header(issued.refresh_token))

    assert resp.status_code == 401


async def test_logout_clears_cookie_even_for_unknown_token(async_client):
    resp = await async_client.get("/api/auth/logout", headers=cookie_header("never-issued"))

    assert resp.status_code == 200
    assert resp.json() == {"status": True}
    morsel = refresh_cookie_of(resp)[REFRESH_TOKEN]
    assert morsel.value == ""


async def test_logout_without_cookie_succeeds(async_client):
    resp = await async_client.get("/api/auth/logout")

    assert resp.status_code == 200


async def test_check_auth_requires_bearer(async_client):
    resp = await async_client.get("/api/auth/check-auth")

    assert resp.status_code == 400


async def test_check_auth_with_valid_access_token(async_client, user_with_headers):
    _, headers = await user_with_headers()

    resp = await async_client.get("/api/auth/check-auth", headers=headers)

    assert resp.status_code == 200
    assert resp.json() == {"status": True}


async def test_check_auth_mints_new_access_token(async_client, db_session, create_test_user):
    user = await create_test_user()
    issued = await token_service.issue_tokens(db_session, user=user, user_agent=UA)

    resp = await async_client.get(
        "/api/auth/check-auth",
        headers={"Authorization": "Bearer stale", **cookie_header(issued.refresh_token)},
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] is True
    assert security.decode_access_token(body["accessToken"])["id"] == user.id


async def test_check_auth_with_bad_tokens_is_401(async_client):
    resp = await async_client.get(
        "/api/auth/check-auth",
        headers={"Authorization": "Bearer stale", **cookie_header("garbage")},
    )

    assert resp.status_code == 401


async def test_sessions_listing_and_revocation(async_client, db_session, user_with_headers):
    user, headers = await user_with_headers()
    issued = await token_service.issue_tokens(db_session, user=user, user_agent=UA)

    listing = await async_client.get("/api/auth/sessions", headers=headers)
    assert listing.status_code == 200
    assert [s["userAgent"] for s in listing.json()] == [UA]

    revoke = await async_client.delete(f"/api/auth/sessions/{issued.token_id}", headers=headers)
    assert revoke.status_code == 204

    again = await async_client.delete(f"/api/auth/sessions/{issued.token_id}", headers=headers)
    assert again.status_code == 404


async def test_sessions_require_authentication(async_client):
    resp = await async_client.get("/api/auth/sessions")

    assert resp.status_code == 401
