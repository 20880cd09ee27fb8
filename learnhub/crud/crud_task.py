# learnhub/crud/crud_task.py
from typing import Iterable, List, Optional
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from learnhub.crud.base import CRUDBase
from learnhub.crud.crud_course import delete_tasks_where
from learnhub.models.learning import Task, TaskTest, TestResult
from learnhub.schemas.learning import TaskCreate, TaskUpdate


class CRUDTask(CRUDBase[Task, TaskCreate, TaskUpdate]):
    async def get(self, db: AsyncSession, id: int) -> Optional[Task]:
        # `populate_existing` so replaced tests are never served from the identity map
        stmt = select(Task).where(Task.id == id).execution_options(populate_existing=True)
        result = await db.execute(stmt)
        return result.scalars().first()

    async def get_by_theme(self, db: AsyncSession, *, theme_id: int, include_disabled: bool = False) -> List[Task]:
        stmt = select(Task).where(Task.theme_id == theme_id).order_by(Task.id)
        if not include_disabled:
            stmt = stmt.where(Task.is_disable == False)  # noqa: E712
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def create(self, db: AsyncSession, *, obj_in: TaskCreate) -> Task:
        task_data = obj_in.model_dump(exclude={"tests"})
        db_obj = Task(**task_data)
        db.add(db_obj)
        await db.flush()
        for test in obj_in.tests:
            db.add(TaskTest(task_id=db_obj.id, input=test.input, output=test.output))
        await db.commit()
        return await self.get(db, id=db_obj.id)

    async def update(self, db: AsyncSession, *, db_obj: Task, obj_in: TaskUpdate) -> Task:
        update_data = obj_in.model_dump(exclude_unset=True, exclude={"tests"})
        for field, value in update_data.items():
            setattr(db_obj, field, value)
        db.add(db_obj)
        if obj_in.tests is not None:
            # Stored results point at the tests being replaced
            await db.execute(delete(TestResult).where(TestResult.task_id == db_obj.id))
            await db.execute(delete(TaskTest).where(TaskTest.task_id == db_obj.id))
            for test in obj_in.tests:
                db.add(TaskTest(task_id=db_obj.id, input=test.input, output=test.output))
        await db.commit()
        return await self.get(db, id=db_obj.id)

    async def remove(self, db: AsyncSession, *, id: int) -> Optional[Task]:
        task = await self.get(db, id=id)
        if task is None:
            return None
        await delete_tasks_where(db, select(Task.id).where(Task.id == id))
        await db.commit()
        return task

    # --- Test results ---
    async def replace_results(
        self, db: AsyncSession, *, user_id: str, task_id: int, results: Iterable[TestResult]
    ) -> List[TestResult]:
        """Stores the results of one grading run, dropping the previous run of (user, task)."""
        await db.execute(
            delete(TestResult).where(TestResult.user_id == user_id, TestResult.task_id == task_id)
        )
        stored = list(results)
        db.add_all(stored)
        await db.commit()
        for row in stored:
            await db.refresh(row)
        return stored

    async def get_results(self, db: AsyncSession, *, user_id: str, task_id: int) -> List[TestResult]:
        stmt = (
            select(TestResult)
            .where(TestResult.user_id == user_id, TestResult.task_id == task_id)
            .order_by(TestResult.task_test_id)
        )
        result = await db.execute(stmt)
        return list(result.scalars().all())

task = CRUDTask(Task)
