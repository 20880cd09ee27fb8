# learnhub/api/endpoints/tasks.py
from typing import Any, List, Optional
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from learnhub.api.dependencies import get_current_user, get_db, get_optional_user, require_roles
from learnhub.models.user import User as UserModel
from learnhub.schemas.enums import RoleName
from learnhub.schemas.execution import ExecuteTaskRequest, TestResult, TestResultsSummary
from learnhub.schemas.learning import Task, TaskCreate, TaskUpdate
from learnhub.services import execution_service, learning_service, role_service

router = APIRouter()

editor = require_roles(RoleName.TEACHER, RoleName.ADMIN)


@router.get("/", response_model=List[Task])
async def read_tasks_of_theme(theme_id: int, db: AsyncSession = Depends(get_db)) -> Any:
    """Enabled tasks of `theme_id`; 404 when the theme has none."""
    return await learning_service.enabled_tasks_of_theme(db, theme_id=theme_id)


@router.post("/", response_model=Task, status_code=status.HTTP_201_CREATED)
async def create_task(
    task_in: TaskCreate,
    db: AsyncSession = Depends(get_db),
    _: UserModel = Depends(editor),
) -> Any:
    return await learning_service.create_task(db, obj_in=task_in)


@router.get("/{task_id}", response_model=Task)
async def read_task(
    task_id: int,
    db: AsyncSession = Depends(get_db),
    caller: Optional[UserModel] = Depends(get_optional_user),
) -> Any:
    return await learning_service.get_task(db, task_id=task_id, caller=caller)


@router.put("/{task_id}", response_model=Task)
async def update_task(
    task_id: int,
    task_in: TaskUpdate,
    db: AsyncSession = Depends(get_db),
    _: UserModel = Depends(editor),
) -> Any:
    """Updates a task; `tests`, when given, replaces every existing test."""
    return await learning_service.update_task(db, task_id=task_id, obj_in=task_in)


@router.delete("/{task_id}", response_model=Task)
async def delete_task(
    task_id: int,
    db: AsyncSession = Depends(get_db),
    _: UserModel = Depends(editor),
) -> Any:
    return await learning_service.delete_task(db, task_id=task_id)


@router.post("/{task_id}/execute", response_model=TestResultsSummary)
async def execute_task(
    task_id: int,
    body: ExecuteTaskRequest,
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
) -> Any:
    """Grades the submitted code against every test of the task."""
    await learning_service.get_task(db, task_id=task_id, caller=current_user)
    return await execution_service.execute_tests_for_task(
        db, user_id=current_user.id, task_id=task_id, code=body.code
    )


@router.get("/{user_id}/{task_id}", response_model=List[TestResult])
async def read_test_results(
    user_id: str,
    task_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
) -> Any:
    """Stored per-test results of the last grading run. Own results, or anyone's for TEACHER/ADMIN."""
    if user_id != current_user.id and not await role_service.is_teacher_or_admin(db, current_user):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not enough privileges for this action")
    return await execution_service.get_results(db, user_id=user_id, task_id=task_id)
