# tests/fixtures/users.py
from typing import Awaitable, Callable, Dict, Optional, Tuple
import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from learnhub.core.security import create_access_token
from learnhub.models.user import User
from learnhub.schemas.enums import RoleName
from learnhub.schemas.user import UserCreate
from learnhub.services import user_service


@pytest.fixture
def create_test_user(db_session: AsyncSession) -> Callable[..., Awaitable[User]]:
    """Factory: a user with the given role (USER by default)."""
    async def _create(
        role: RoleName = RoleName.USER,
        nick_name: Optional[str] = None,
        display_name: Optional[str] = None,
        is_blocked: bool = False,
    ) -> User:
        obj_in = UserCreate(nick_name=nick_name, display_name=display_name)
        user = await user_service.create_user(db_session, role=role, obj_in=obj_in)
        if is_blocked:
            user.is_blocked = True
            await db_session.commit()
            await db_session.refresh(user)
        return user

    return _create


@pytest.fixture
def user_with_headers(create_test_user) -> Callable[..., Awaitable[Tuple[User, Dict[str, str]]]]:
    """Same as create_test_user, also returning ready-to-use bearer headers."""
    async def _create(**kwargs):
        user = await create_test_user(**kwargs)
        token = create_access_token(user.id)
        return user, {"Authorization": f"Bearer {token}"}

    return _create
