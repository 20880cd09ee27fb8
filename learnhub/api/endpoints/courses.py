# learnhub/api/endpoints/courses.py
from typing import Any, List, Optional
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from learnhub.api.dependencies import get_db, get_optional_user, require_roles
from learnhub.models.user import User as UserModel
from learnhub.schemas.enums import RoleName
from learnhub.schemas.learning import Course, CourseCreate, CourseUpdate, Theme
from learnhub.services import learning_service

router = APIRouter()

# TEACHER or ADMIN
editor = require_roles(RoleName.TEACHER, RoleName.ADMIN)


@router.get("/", response_model=List[Course])
async def read_courses(
    db: AsyncSession = Depends(get_db),
    caller: Optional[UserModel] = Depends(get_optional_user),
) -> Any:
    """All courses for TEACHER/ADMIN, enabled ones for everybody else."""
    return await learning_service.list_courses(db, caller=caller)


@router.post("/", response_model=Course, status_code=status.HTTP_201_CREATED)
async def create_course(
    course_in: CourseCreate,
    db: AsyncSession = Depends(get_db),
    _: UserModel = Depends(editor),
) -> Any:
    return await learning_service.create_course(db, obj_in=course_in)


@router.get("/{course_id}", response_model=Course)
async def read_course(
    course_id: int,
    db: AsyncSession = Depends(get_db),
    caller: Optional[UserModel] = Depends(get_optional_user),
) -> Any:
    return await learning_service.get_course(db, course_id=course_id, caller=caller)


@router.put("/{course_id}", response_model=Course)
async def update_course(
    course_id: int,
    course_in: CourseUpdate,
    db: AsyncSession = Depends(get_db),
    _: UserModel = Depends(editor),
) -> Any:
    return await learning_service.update_course(db, course_id=course_id, obj_in=course_in)


@router.delete("/{course_id}", response_model=Course)
async def delete_course(
    course_id: int,
    db: AsyncSession = Depends(get_db),
    _: UserModel = Depends(editor),
) -> Any:
    return await learning_service.delete_course(db, course_id=course_id)


@router.get("/{course_id}/themes", response_model=List[Theme])
async def read_course_themes(
    course_id: int,
    db: AsyncSession = Depends(get_db),
    caller: Optional[UserModel] = Depends(get_optional_user),
) -> Any:
    return await learning_service.list_course_themes(db, course_id=course_id, caller=caller)
