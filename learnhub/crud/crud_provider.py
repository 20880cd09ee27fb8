# learnhub/crud/crud_provider.py
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from learnhub.models.provider import Provider, ProviderToken


async def get_by_external_id(
    db: AsyncSession, *, provider_user_id: str, provider_type_id: int
) -> Optional[Provider]:
    stmt = select(Provider).where(
        Provider.provider_user_id == provider_user_id,
        Provider.provider_type_id == provider_type_id,
    )
    result = await db.execute(stmt)
    return result.scalars().first()


async def get_by_user(db: AsyncSession, *, user_id: str, provider_type_id: int) -> Optional[Provider]:
    stmt = select(Provider).where(Provider.user_id == user_id, Provider.provider_type_id == provider_type_id)
    result = await db.execute(stmt)
    return result.scalars().first()


async def create(
    db: AsyncSession, *, user_id: str, provider_user_id: str, provider_type_id: int, commit: bool = True
) -> Provider:
    provider = Provider(user_id=user_id, provider_user_id=provider_user_id, provider_type_id=provider_type_id)
    db.add(provider)
    if commit:
        await db.commit()
        await db.refresh(provider)
    else:
        await db.flush()
    return provider


async def get_provider_token(db: AsyncSession, *, provider_token: str) -> Optional[ProviderToken]:
    stmt = select(ProviderToken).where(ProviderToken.provider_token == provider_token)
    result = await db.execute(stmt)
    return result.scalars().first()


async def create_provider_token(
    db: AsyncSession, *, provider_token: str, provider_id: int, provider_type_id: int
) -> ProviderToken:
    db_obj = ProviderToken(
        provider_token=provider_token,
        provider_id=provider_id,
        provider_type_id=provider_type_id,
    )
    db.add(db_obj)
    await db.commit()
    await db.refresh(db_obj)
    return db_obj
