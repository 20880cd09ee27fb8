# learnhub/api/endpoints/themes.py
from typing import Any, List, Optional
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from learnhub.api.dependencies import get_db, get_optional_user, require_roles
from learnhub.models.user import User as UserModel
from learnhub.schemas.enums import RoleName
from learnhub.schemas.learning import Task, Theme, ThemeCreate, ThemeUpdate
from learnhub.services import learning_service

router = APIRouter()

editor = require_roles(RoleName.TEACHER, RoleName.ADMIN)


@router.get("/", response_model=List[Theme])
async def read_themes(
    db: AsyncSession = Depends(get_db),
    caller: Optional[UserModel] = Depends(get_optional_user),
) -> Any:
    return await learning_service.list_themes(db, caller=caller)


@router.post("/", response_model=Theme, status_code=status.HTTP_201_CREATED)
async def create_theme(
    theme_in: ThemeCreate,
    db: AsyncSession = Depends(get_db),
    _: UserModel = Depends(editor),
) -> Any:
    return await learning_service.create_theme(db, obj_in=theme_in)


@router.get("/{theme_id}", response_model=Theme)
async def read_theme(
    theme_id: int,
    db: AsyncSession = Depends(get_db),
    caller: Optional[UserModel] = Depends(get_optional_user),
) -> Any:
    return await learning_service.get_theme(db, theme_id=theme_id, caller=caller)


@router.put("/{theme_id}", response_model=Theme)
async def update_theme(
    theme_id: int,
    theme_in: ThemeUpdate,
    db: AsyncSession = Depends(get_db),
    _: UserModel = Depends(editor),
) -> Any:
    return await learning_service.update_theme(db, theme_id=theme_id, obj_in=theme_in)


@router.delete("/{theme_id}", response_model=Theme)
async def delete_theme(
    theme_id: int,
    db: AsyncSession = Depends(get_db),
    _: UserModel = Depends(editor),
) -> Any:
    return await learning_service.delete_theme(db, theme_id=theme_id)


@router.get("/{theme_id}/tasks", response_model=List[Task])
async def read_theme_tasks(
    theme_id: int,
    db: AsyncSession = Depends(get_db),
    caller: Optional[UserModel] = Depends(get_optional_user),
) -> Any:
    return await learning_service.list_theme_tasks(db, theme_id=theme_id, caller=caller)
