# learnhub/crud/crud_course.py
from typing import List, Optional
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from learnhub.crud.base import CRUDBase
from learnhub.models.learning import Course, Task, TaskTest, TestResult, Theme
from learnhub.schemas.learning import CourseCreate, CourseUpdate


async def delete_tasks_where(db: AsyncSession, task_ids) -> None:
    """Deletes tasks selected by `task_ids` with their tests and results. Does not commit."""
    await db.execute(delete(TestResult).where(TestResult.task_id.in_(task_ids)))
    await db.execute(delete(TaskTest).where(TaskTest.task_id.in_(task_ids)))
    await db.execute(delete(Task).where(Task.id.in_(task_ids)))


class CRUDCourse(CRUDBase[Course, CourseCreate, CourseUpdate]):
    async def get_multi_visible(self, db: AsyncSession, *, include_disabled: bool) -> List[Course]:
        stmt = select(Course).order_by(Course.id)
        if not include_disabled:
            stmt = stmt.where(Course.is_disable == False)  # noqa: E712
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def remove(self, db: AsyncSession, *, id: int) -> Optional[Course]:
        course = await self.get(db, id=id)
        if course is None:
            return None
        theme_ids = select(Theme.id).where(Theme.course_id == id)
        await delete_tasks_where(db, select(Task.id).where(Task.theme_id.in_(theme_ids)))
        await db.execute(delete(Theme).where(Theme.course_id == id))
        await db.execute(delete(Course).where(Course.id == id))
        await db.commit()
        return course

course = CRUDCourse(Course)
