# learnhub/services/role_service.py
from typing import Any, Mapping, Optional, Union
from sqlalchemy.ext.asyncio import AsyncSession

from learnhub.core.exceptions import NotFoundError
from learnhub.crud.crud_user import user as crud_user
from learnhub.models.user import Role, User
from learnhub.schemas.enums import PRIVILEGED_ROLES, RoleName

# What callers hand us as "the current identity": a User row, decoded JWT claims or a bare id
Identity = Union[User, Mapping[str, Any], str]


def identity_id(identity: Optional[Identity]) -> Optional[str]:
    if identity is None:
        return None
    if isinstance(identity, User):
        return identity.id
    if isinstance(identity, str):
        return identity or None
    value = identity.get("id")
    return str(value) if value else None


async def get_user_role_by_id(db: AsyncSession, user_id: str) -> Role:
    """Role of `user_id`. Raises NotFoundError when the user or its role link is missing."""
    user = await crud_user.get(db, id=user_id)
    if user is None or user.role is None:
        raise NotFoundError(f"User with ID {user_id} or user's role not found")
    return user.role


async def has_role(db: AsyncSession, identity: Optional[Identity], *roles: RoleName) -> bool:
    user_id = identity_id(identity)
    if user_id is None:
        return False
    try:
        role = await get_user_role_by_id(db, user_id)
    except NotFoundError:
        return False
    return role.name in {r.value for r in roles}


async def is_teacher_or_admin(db: AsyncSession, identity: Optional[Identity]) -> bool:
    """
    Visibility predicate, not an authentication check: anonymous or unknown
    identities count as plain USER and get False.
    """
    return await has_role(db, identity, *PRIVILEGED_ROLES)
