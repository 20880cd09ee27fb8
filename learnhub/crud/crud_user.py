# learnhub/crud/crud_user.py
from typing import Optional
from sqlalchemy import delete, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from learnhub.crud.base import CRUDBase
from learnhub.models.learning import TestResult
from learnhub.models.provider import Provider, ProviderToken
from learnhub.models.session import Session
from learnhub.models.token import Token
from learnhub.models.user import User
from learnhub.schemas.user import UserCreate, UserUpdate
from loguru import logger


class CRUDUser(CRUDBase[User, UserCreate, UserUpdate]):
    async def get(self, db: AsyncSession, id: str) -> Optional[User]:
        # a SELECT (not an identity-map hit) so `role` is always loaded
        stmt = select(User).where(User.id == id)
        result = await db.execute(stmt)
        return result.scalars().first()

    async def get_by_nick_name(self, db: AsyncSession, *, nick_name: str) -> Optional[User]:
        stmt = select(User).where(User.nick_name == nick_name)
        result = await db.execute(stmt)
        return result.scalars().first()

    async def create_with_role(
        self, db: AsyncSession, *, role_id: int, obj_in: Optional[UserCreate] = None, commit: bool = True
    ) -> User:
        data = obj_in.model_dump() if obj_in else {}
        db_obj = User(role_id=role_id, is_blocked=False, **data)
        db.add(db_obj)
        if commit:
            await db.commit()
            await db.refresh(db_obj)
        else:
            await db.flush()
        return db_obj

    async def remove(self, db: AsyncSession, *, id: str) -> Optional[User]:
        """Deletes a user together with everything that hangs off it."""
        user = await self.get(db, id=id)
        if user is None:
            return None

        token_ids = select(Token.id).where(Token.user_id == id)
        provider_ids = select(Provider.id).where(Provider.user_id == id)
        provider_token_ids = select(ProviderToken.id).where(ProviderToken.provider_id.in_(provider_ids))

        await db.execute(
            delete(Session).where(Session.provider_token_id.in_(provider_token_ids))
        )
        await db.execute(
            update(Session).where(Session.refresh_token_id.in_(token_ids)).values(refresh_token_id=None)
        )
        await db.execute(delete(ProviderToken).where(ProviderToken.provider_id.in_(provider_ids)))
        await db.execute(delete(Provider).where(Provider.user_id == id))
        await db.execute(delete(Token).where(Token.user_id == id))
        await db.execute(delete(TestResult).where(TestResult.user_id == id))
        await db.execute(delete(User).where(User.id == id))
        await db.commit()
        logger.info(f"User {id} deleted with tokens, provider links and results")
        return user

    async def nick_name_taken(self, db: AsyncSession, *, nick_name: str, exclude_id: str) -> bool:
        stmt = select(User.id).where(User.nick_name == nick_name, User.id != exclude_id)
        result = await db.execute(stmt)
        return result.first() is not None

user = CRUDUser(User)
