import pytest

from learnhub.models.learning import Course, Task, TaskTest, Theme
from learnhub.schemas.enums import RoleName
from learnhub.services import execution_service

pytestmark = pytest.mark.anyio

TASK_PAYLOAD = {
    "name": "Sum",
    "description": "Add two numbers",
    "run_timeout": 3000,
    "run_memory_limit": 128000000,
    "compile_timeout": 10000,
    "compile_memory_limit": 128000000,
    "tests": [{"input": "1 2", "output": "3"}, {"input": "2 2", "output": "4"}],
}


@pytest.fixture
async def catalog(db_session):
    """One enabled and one disabled course, each with a theme and a task."""
    visible = Course(name="Python basics", is_disable=False)
    hidden = Course(name="Draft course", is_disable=True)
    db_session.add_all([visible, hidden])
    await db_session.flush()
    theme = Theme(course_id=visible.id, name="Loops", is_disable=False)
    hidden_theme = Theme(course_id=visible.id, name="Draft theme", is_disable=True)
    db_session.add_all([theme, hidden_theme])
    await db_session.flush()
    task = Task(theme_id=theme.id, name="Echo", run_timeout=1000, run_memory_limit=1, compile_timeout=1000,
                compile_memory_limit=1, is_disable=False)
    hidden_task = Task(theme_id=theme.id, name="Draft task", run_timeout=1000, run_memory_limit=1,
                       compile_timeout=1000, compile_memory_limit=1, is_disable=True)
    db_session.add_all([task, hidden_task])
    await db_session.flush()
    db_session.add(TaskTest(task_id=task.id, input="x", output="x"))
    await db_session.commit()
    return {"visible": visible, "hidden": hidden, "theme": theme, "hidden_theme": hidden_theme,
            "task": task, "hidden_task": hidden_task}


async def test_user_does_not_see_disabled_courses(async_client, catalog, user_with_headers):
    _, headers = await user_with_headers(role=RoleName.USER)

    resp = await async_client.get("/api/learning/course/", headers=headers)

    assert resp.status_code == 200
    assert [c["name"] for c in resp.json()] == ["Python basics"]


async def test_anonymous_caller_is_treated_as_user(async_client, catalog):
    resp = await async_client.get("/api/learning/course/")

    assert [c["name"] for c in resp.json()] == ["Python basics"]


async def test_admin_sees_disabled_courses(async_client, catalog, user_with_headers):
    _, headers = await user_with_headers(role=RoleName.ADMIN)

    resp = await async_client.get("/api/learning/course/", headers=headers)

    assert sorted(c["name"] for c in resp.json()) == ["Draft course", "Python basics"]


async def test_disabled_course_by_id_is_404_for_user(async_client, catalog, user_with_headers):
    _, user_headers = await user_with_headers()
    _, teacher_headers = await user_with_headers(role=RoleName.TEACHER)
    course_id = catalog["hidden"].id

    assert (await async_client.get(f"/api/learning/course/{course_id}", headers=user_headers)).status_code == 404
    assert (await async_client.get(f"/api/learning/course/{course_id}", headers=teacher_headers)).status_code == 200


async def test_missing_course_message_names_the_id(async_client):
    resp = await async_client.get("/api/learning/course/4242")

    assert resp.status_code == 404
    assert resp.json()["detail"] == "Course with ID 4242 not found"


async def test_course_themes_are_filtered(async_client, catalog, user_with_headers):
    _, headers = await user_with_headers()

    resp = await async_client.get(f"/api/learning/course/{catalog['visible'].id}/themes", headers=headers)

    assert [t["name"] for t in resp.json()] == ["Loops"]


async def test_user_cannot_create_course(async_client, user_with_headers):
    _, headers = await user_with_headers()

    resp = await async_client.post("/api/learning/course/", json={"name": "Rust"}, headers=headers)

    assert resp.status_code == 403


async def test_teacher_builds_course_theme_and_task(async_client, user_with_headers):
    _, headers = await user_with_headers(role=RoleName.TEACHER)

    course = await async_client.post("/api/learning/course/", json={"name": "Rust"}, headers=headers)
    assert course.status_code == 201, course.text
    theme = await async_client.post(
        "/api/learning/theme/", json={"name": "Ownership", "course_id": course.json()["id"]}, headers=headers
    )
    assert theme.status_code == 201, theme.text
    task = await async_client.post(
        "/api/learning/task/", json={**TASK_PAYLOAD, "theme_id": theme.json()["id"]}, headers=headers
    )
    assert task.status_code == 201, task.text
    assert [t["input"] for t in task.json()["tests"]] == ["1 2", "2 2"]


async def test_theme_for_unknown_course_is_404(async_client, user_with_headers):
    _, headers = await user_with_headers(role=RoleName.ADMIN)

    resp = await async_client.post("/api/learning/theme/", json={"name": "Orphan", "course_id": 999}, headers=headers)

    assert resp.status_code == 404


async def test_task_update_replaces_tests(async_client, catalog, user_with_headers):
    _, headers = await user_with_headers(role=RoleName.TEACHER)
    task_id = catalog["task"].id

    resp = await async_client.put(
        f"/api/learning/task/{task_id}",
        json={"name": "Echo twice", "tests": [{"input": "a", "output": "aa"}]},
        headers=headers,
    )

    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["name"] == "Echo twice"
    assert [(t["input"], t["output"]) for t in body["tests"]] == [("a", "aa")]


async def test_enabled_tasks_of_theme(async_client, catalog):
    resp = await async_client.get("/api/learning/task/", params={"theme_id": catalog["theme"].id})

    assert resp.status_code == 200
    assert [t["name"] for t in resp.json()] == ["Echo"]

    empty = await async_client.get("/api/learning/task/", params={"theme_id": catalog["hidden_theme"].id})
    assert empty.status_code == 404


async def test_deleting_course_removes_children(async_client, catalog, user_with_headers):
    _, headers = await user_with_headers(role=RoleName.ADMIN)
    course_id = catalog["visible"].id

    resp = await async_client.delete(f"/api/learning/course/{course_id}", headers=headers)

    assert resp.status_code == 200
    assert (await async_client.get(f"/api/learning/theme/{catalog['theme'].id}", headers=headers)).status_code == 404
    assert (await async_client.get(f"/api/learning/task/{catalog['task'].id}", headers=headers)).status_code == 404


async def test_execute_task_returns_summary(async_client, catalog, user_with_headers, monkeypatch):
    user, headers = await user_with_headers()

    async def fake_execute(request, client):
        run = execution_service.ExecutionResponse.model_validate(
            {"run": {"stdout": "x\n", "stderr": "", "output": "x\n", "code": 0, "signal": None}}
        )
        return run

    monkeypatch.setattr(execution_service, "execute", fake_execute)

    resp = await async_client.post(
        f"/api/learning/task/{catalog['task'].id}/execute", json={"code": "print(input())"}, headers=headers
    )

    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert (body["passedTests"], body["totalTests"]) == (1, 1)

    results = await async_client.get(f"/api/learning/task/{user.id}/{catalog['task'].id}", headers=headers)
    assert results.status_code == 200
    assert [r["passed"] for r in results.json()] == [True]


async def test_results_of_other_user_are_forbidden(async_client, catalog, user_with_headers):
    owner, _ = await user_with_headers()
    _, stranger_headers = await user_with_headers()

    resp = await async_client.get(f"/api/learning/task/{owner.id}/{catalog['task'].id}", headers=stranger_headers)

    assert resp.status_code == 403


async def test_check_execute_rejects_empty_code(async_client, user_with_headers):
    _, headers = await user_with_headers()

    resp = await async_client.post("/api/check/execute", json={"code": ""}, headers=headers)

    assert resp.status_code == 400
