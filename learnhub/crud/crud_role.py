# learnhub/crud/crud_role.py
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from learnhub.models.provider import ProviderType
from learnhub.models.user import Role
from learnhub.schemas.enums import RoleName, ProviderTypeName
from loguru import logger


async def get_role_by_name(db: AsyncSession, *, name: RoleName | str) -> Optional[Role]:
    stmt = select(Role).where(Role.name == RoleName(name).value)
    result = await db.execute(stmt)
    return result.scalars().first()


async def get_provider_type_by_name(db: AsyncSession, *, name: ProviderTypeName | str) -> Optional[ProviderType]:
    stmt = select(ProviderType).where(ProviderType.name == ProviderTypeName(name).value)
    result = await db.execute(stmt)
    return result.scalars().first()


async def seed_reference_data(db: AsyncSession) -> List[str]:
    """
    Inserts every RoleName and ProviderTypeName that is not stored yet, then
    checks that the stored rows cover both enums. Safe to run on every start.
    Returns the names that were created.
    """
    created: List[str] = []
    for model, enum_cls in ((Role, RoleName), (ProviderType, ProviderTypeName)):
        for member in enum_cls:
            stmt = select(model).where(model.name == member.value)
            exists = (await db.execute(stmt)).scalars().first()
            if exists is None:
                db.add(model(name=member.value))
                created.append(member.value)
    if created:
        await db.commit()
        logger.info(f"Seeded reference data: {', '.join(created)}")

    for model, enum_cls in ((Role, RoleName), (ProviderType, ProviderTypeName)):
        stored = set((await db.execute(select(model.name))).scalars().all())
        missing = {m.value for m in enum_cls} - stored
        if missing:
            raise RuntimeError(f"{model.__tablename__} is missing {sorted(missing)}")
    return created
