import pytest

from learnhub.schemas.enums import RoleName

pytestmark = pytest.mark.anyio


async def test_me(async_client, user_with_headers):
    user, headers = await user_with_headers(nick_name="linus", display_name="Linus")

    resp = await async_client.get("/api/user/", headers=headers)

    assert resp.status_code == 200
    body = resp.json()
    assert body["id"] == user.id
    assert body["nick_name"] == "linus"
    assert body["role"] == {"name": "USER"}


async def test_me_requires_token(async_client):
    resp = await async_client.get("/api/user/")

    assert resp.status_code == 401
    assert resp.headers["www-authenticate"] == "Bearer"


async def test_blocked_user_is_rejected(async_client, user_with_headers):
    _, headers = await user_with_headers(is_blocked=True)

    resp = await async_client.get("/api/user/", headers=headers)

    assert resp.status_code == 403


async def test_own_role_and_role_by_id(async_client, user_with_headers):
    teacher, teacher_headers = await user_with_headers(role=RoleName.TEACHER)
    _, headers = await user_with_headers()

    own = await async_client.get("/api/user/role", headers=teacher_headers)
    other = await async_client.get(f"/api/user/{teacher.id}/role", headers=headers)

    assert own.json() == "TEACHER"
    assert other.json() == "TEACHER"


async def test_lookup_by_handle(async_client, user_with_headers):
    target, _ = await user_with_headers(nick_name="margaret")
    _, headers = await user_with_headers()

    resp = await async_client.get("/api/user/margaret", headers=headers)
    missing = await async_client.get("/api/user/nobody", headers=headers)

    assert resp.json()["id"] == target.id
    assert missing.status_code == 404


async def test_update_own_profile(async_client, user_with_headers):
    _, headers = await user_with_headers(nick_name="before")

    resp = await async_client.put("/api/user/", json={"nick_name": "after"}, headers=headers)

    assert resp.status_code == 200, resp.text
    assert resp.json()["nick_name"] == "after"
    assert (await async_client.get("/api/user/after", headers=headers)).status_code == 200


async def test_user_cannot_block_someone(async_client, user_with_headers):
    target, _ = await user_with_headers()
    _, headers = await user_with_headers()

    resp = await async_client.put("/api/user/", json={"id": target.id, "is_blocked": True}, headers=headers)

    assert resp.status_code == 403


async def test_delete_other_user_requires_admin(async_client, user_with_headers):
    target, _ = await user_with_headers()
    _, user_headers = await user_with_headers()
    _, admin_headers = await user_with_headers(role=RoleName.ADMIN)

    assert (await async_client.delete(f"/api/user/{target.id}", headers=user_headers)).status_code == 403

    resp = await async_client.delete(f"/api/user/{target.id}", headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json() == {"id": target.id}


async def test_delete_requires_uuid(async_client, user_with_headers):
    _, headers = await user_with_headers()

    resp = await async_client.delete("/api/user/not-a-uuid", headers=headers)

    assert resp.status_code == 400
