# learnhub/services/learning_service.py
"""
Courses, themes and tasks as seen by a caller: non-privileged callers
(anonymous or USER) never see records flagged `is_disable`.
"""
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession

from learnhub.core.exceptions import NotFoundError
from learnhub.crud.crud_course import course as crud_course
from learnhub.crud.crud_task import task as crud_task
from learnhub.crud.crud_theme import theme as crud_theme
from learnhub.models.learning import Course, Task, Theme
from learnhub.schemas.learning import (
    CourseCreate, CourseUpdate, TaskCreate, TaskUpdate, ThemeCreate, ThemeUpdate
)
from learnhub.services import role_service
from learnhub.services.role_service import Identity
from loguru import logger


async def _can_see_disabled(db: AsyncSession, caller: Optional[Identity]) -> bool:
    return await role_service.is_teacher_or_admin(db, caller)


async def _visible_or_404(db: AsyncSession, record, caller: Optional[Identity], label: str, id: int):
    if record is None or (record.is_disable and not await _can_see_disabled(db, caller)):
        raise NotFoundError(f"{label} with ID {id} not found")
    return record


# --- Courses ---
async def list_courses(db: AsyncSession, *, caller: Optional[Identity]) -> List[Course]:
    include_disabled = await _can_see_disabled(db, caller)
    return await crud_course.get_multi_visible(db, include_disabled=include_disabled)


async def get_course(db: AsyncSession, *, course_id: int, caller: Optional[Identity]) -> Course:
    db_course = await crud_course.get(db, id=course_id)
    return await _visible_or_404(db, db_course, caller, "Course", course_id)


async def create_course(db: AsyncSession, *, obj_in: CourseCreate) -> Course:
    db_course = await crud_course.create(db, obj_in=obj_in)
    logger.info(f"Course {db_course.id} created")
    return db_course


async def update_course(db: AsyncSession, *, course_id: int, obj_in: CourseUpdate) -> Course:
    db_course = await crud_course.get(db, id=course_id)
    if db_course is None:
        raise NotFoundError(f"Course with ID {course_id} not found")
    return await crud_course.update(db, db_obj=db_course, obj_in=obj_in)


async def delete_course(db: AsyncSession, *, course_id: int) -> Course:
    db_course = await crud_course.remove(db, id=course_id)
    if db_course is None:
        raise NotFoundError(f"Course with ID {course_id} not found")
    logger.info(f"Course {course_id} deleted with its themes and tasks")
    return db_course


async def list_course_themes(db: AsyncSession, *, course_id: int, caller: Optional[Identity]) -> List[Theme]:
    await get_course(db, course_id=course_id, caller=caller)
    include_disabled = await _can_see_disabled(db, caller)
    return await crud_theme.get_multi_visible(db, include_disabled=include_disabled, course_id=course_id)


# --- Themes ---
async def list_themes(db: AsyncSession, *, caller: Optional[Identity]) -> List[Theme]:
    include_disabled = await _can_see_disabled(db, caller)
    return await crud_theme.get_multi_visible(db, include_disabled=include_disabled)


async def get_theme(db: AsyncSession, *, theme_id: int, caller: Optional[Identity]) -> Theme:
    db_theme = await crud_theme.get(db, id=theme_id)
    return await _visible_or_404(db, db_theme, caller, "Theme", theme_id)


async def create_theme(db: AsyncSession, *, obj_in: ThemeCreate) -> Theme:
    if await crud_course.get(db, id=obj_in.course_id) is None:
        raise NotFoundError(f"Course with ID {obj_in.course_id} not found")
    db_theme = await crud_theme.create(db, obj_in=obj_in)
    logger.info(f"Theme {db_theme.id} created in course {obj_in.course_id}")
    return db_theme


async def update_theme(db: AsyncSession, *, theme_id: int, obj_in: ThemeUpdate) -> Theme:
    db_theme = await crud_theme.get(db, id=theme_id)
    if db_theme is None:
        raise NotFoundError(f"Theme with ID {theme_id} not found")
    return await crud_theme.update(db, db_obj=db_theme, obj_in=obj_in)


async def delete_theme(db: AsyncSession, *, theme_id: int) -> Theme:
    db_theme = await crud_theme.remove(db, id=theme_id)
    if db_theme is None:
        raise NotFoundError(f"Theme with ID {theme_id} not found")
    logger.info(f"Theme {theme_id} deleted with its tasks")
    return db_theme


async def list_theme_tasks(db: AsyncSession, *, theme_id: int, caller: Optional[Identity]) -> List[Task]:
    await get_theme(db, theme_id=theme_id, caller=caller)
    include_disabled = await _can_see_disabled(db, caller)
    return await crud_task.get_by_theme(db, theme_id=theme_id, include_disabled=include_disabled)


# --- Tasks ---
async def get_task(db: AsyncSession, *, task_id: int, caller: Optional[Identity]) -> Task:
    db_task = await crud_task.get(db, id=task_id)
    return await _visible_or_404(db, db_task, caller, "Task", task_id)


async def enabled_tasks_of_theme(db: AsyncSession, *, theme_id: int) -> List[Task]:
    """Enabled tasks of a theme; a theme with none is reported as not found."""
    tasks = await crud_task.get_by_theme(db, theme_id=theme_id)
    if not tasks:
        raise NotFoundError(f"No tasks found for theme with ID {theme_id}")
    return tasks


async def create_task(db: AsyncSession, *, obj_in: TaskCreate) -> Task:
    if await crud_theme.get(db, id=obj_in.theme_id) is None:
        raise NotFoundError(f"Theme with ID {obj_in.theme_id} not found")
    db_task = await crud_task.create(db, obj_in=obj_in)
    logger.info(f"Task {db_task.id} created with {len(db_task.tests)} tests")
    return db_task


async def update_task(db: AsyncSession, *, task_id: int, obj_in: TaskUpdate) -> Task:
    db_task = await crud_task.get(db, id=task_id)
    if db_task is None:
        raise NotFoundError(f"Task with ID {task_id} not found")
    return await crud_task.update(db, db_obj=db_task, obj_in=obj_in)


async def delete_task(db: AsyncSession, *, task_id: int) -> Task:
    db_task = await crud_task.remove(db, id=task_id)
    if db_task is None:
        raise NotFoundError(f"Task with ID {task_id} not found")
    logger.info(f"Task {task_id} deleted")
    return db_task
