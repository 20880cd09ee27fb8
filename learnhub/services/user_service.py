# learnhub/services/user_service.py
import uuid
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession

from learnhub.core.cache import TTLMap
from learnhub.core.config import settings
from learnhub.core.exceptions import BadRequestError, ForbiddenError, NotFoundError
from learnhub.crud import crud_role
from learnhub.crud.crud_user import user as crud_user
from learnhub.models.user import User
from learnhub.schemas.enums import RoleName
from learnhub.schemas.user import UserCreate, UserUpdate
from learnhub.services import role_service
from loguru import logger

# Read-through cache of users keyed by the identifier they were looked up with
user_cache = TTLMap(maxsize=settings.USER_CACHE_MAXSIZE)


def _cache_key(identifier: str) -> str:
    return f"user:{identifier}"


def normalize_id(value: str) -> Optional[str]:
    """Canonical form of a user id (lowercase, hyphenated), or None when `value` is not a UUID."""
    try:
        return str(uuid.UUID(value))
    except (ValueError, AttributeError, TypeError):
        return None


def is_uuid(value: str) -> bool:
    return normalize_id(value) is not None


def invalidate(db_user: User) -> None:
    """Drops every cache entry that may hold `db_user`."""
    user_cache.delete(_cache_key(db_user.id))
    if db_user.nick_name:
        user_cache.delete(_cache_key(db_user.nick_name))


async def create_user(
    db: AsyncSession, *, role: RoleName = RoleName.USER, obj_in: Optional[UserCreate] = None, commit: bool = True
) -> User:
    db_role = await crud_role.get_role_by_name(db, name=role)
    if db_role is None:
        raise NotFoundError(f"Role {role.value} not found")
    db_user = await crud_user.create_with_role(db, role_id=db_role.id, obj_in=obj_in, commit=commit)
    logger.info(f"User {db_user.id} created with role {role.value}")
    return db_user


async def find_by_identifier(db: AsyncSession, identifier: str) -> Optional[User]:
    """Looks a user up by id (UUID, any case) or by handle, through the cache."""
    user_id = normalize_id(identifier)
    key = _cache_key(user_id or identifier)
    cached = user_cache.get(key)
    if cached is not None:
        return cached

    if user_id is not None:
        db_user = await crud_user.get(db, id=user_id)
    else:
        db_user = await crud_user.get_by_nick_name(db, nick_name=identifier)

    if db_user is not None:
        user_cache.set(key, db_user, settings.USER_CACHE_TTL_SECONDS)
    return db_user


async def get_role_by_user_id(db: AsyncSession, identifier: str) -> RoleName:
    db_user = await find_by_identifier(db, identifier)
    if db_user is None:
        raise NotFoundError(f"User with ID {identifier} not found")
    role = await role_service.get_user_role_by_id(db, db_user.id)
    return RoleName(role.name)


async def update(db: AsyncSession, *, obj_in: UserUpdate, requester_id: str) -> User:
    """
    Updates a profile. Users edit their own handle and display name; only an
    ADMIN may edit another user or touch `is_blocked` / `role`.
    """
    target_id = (normalize_id(obj_in.id) or obj_in.id) if obj_in.id else requester_id
    is_admin = await role_service.has_role(db, requester_id, RoleName.ADMIN)
    privileged_fields = obj_in.is_blocked is not None or obj_in.role is not None
    if (target_id != requester_id or privileged_fields) and not is_admin:
        raise ForbiddenError("You do not have permission to update this user.")

    db_user = await crud_user.get(db, id=target_id)
    if db_user is None:
        raise NotFoundError(f"User with ID {target_id} not found")
    if obj_in.nick_name and await crud_user.nick_name_taken(db, nick_name=obj_in.nick_name, exclude_id=target_id):
        raise BadRequestError(f"Handle {obj_in.nick_name} is already taken")

    update_data = obj_in.model_dump(exclude_unset=True, exclude={"id", "role"})
    if obj_in.role is not None:
        db_role = await crud_role.get_role_by_name(db, name=obj_in.role)
        if db_role is None:
            raise NotFoundError(f"Role {obj_in.role.value} not found")
        update_data["role"] = db_role

    # entries under the old handle must go too
    invalidate(db_user)
    db_user = await crud_user.update(db, db_obj=db_user, obj_in=update_data)
    invalidate(db_user)
    return db_user


async def delete(db: AsyncSession, *, target_id: str, requester_id: str) -> str:
    """Deletes `target_id`. Allowed for the user itself and for ADMINs."""
    target_id = normalize_id(target_id) or target_id
    if target_id != requester_id and not await role_service.has_role(db, requester_id, RoleName.ADMIN):
        raise ForbiddenError("You do not have permission to delete this user.")

    db_user = await crud_user.remove(db, id=target_id)
    if db_user is None:
        raise NotFoundError(f"User with ID {target_id} not found")
    invalidate(db_user)
    return target_id
