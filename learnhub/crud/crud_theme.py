# learnhub/crud/crud_theme.py
from typing import List, Optional
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from learnhub.crud.base import CRUDBase
from learnhub.crud.crud_course import delete_tasks_where
from learnhub.models.learning import Task, Theme
from learnhub.schemas.learning import ThemeCreate, ThemeUpdate


class CRUDTheme(CRUDBase[Theme, ThemeCreate, ThemeUpdate]):
    async def get_multi_visible(
        self, db: AsyncSession, *, include_disabled: bool, course_id: Optional[int] = None
    ) -> List[Theme]:
        stmt = select(Theme).order_by(Theme.id)
        if course_id is not None:
            stmt = stmt.where(Theme.course_id == course_id)
        if not include_disabled:
            stmt = stmt.where(Theme.is_disable == False)  # noqa: E712
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def remove(self, db: AsyncSession, *, id: int) -> Optional[Theme]:
        theme = await self.get(db, id=id)
        if theme is None:
            return None
        await delete_tasks_where(db, select(Task.id).where(Task.theme_id == id))
        await db.execute(delete(Theme).where(Theme.id == id))
        await db.commit()
        return theme

theme = CRUDTheme(Theme)
