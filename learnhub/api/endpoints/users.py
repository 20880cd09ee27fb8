# learnhub/api/endpoints/users.py
from typing import Any
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from learnhub.api.dependencies import get_current_user, get_db
from learnhub.models.user import User as UserModel
from learnhub.schemas.enums import RoleName
from learnhub.schemas.user import DeletedUser, User as UserSchema, UserUpdate
from learnhub.services import user_service

router = APIRouter()


@router.get("/", response_model=UserSchema)
async def read_user_me(current_user: UserModel = Depends(get_current_user)) -> Any:
    return current_user


@router.get("/role", response_model=RoleName)
async def read_own_role(
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
) -> Any:
    return await user_service.get_role_by_user_id(db, current_user.id)


@router.get("/{user_id}/role", response_model=RoleName)
async def read_user_role(
    user_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
) -> Any:
    return await user_service.get_role_by_user_id(db, user_id)


@router.get("/{identifier}", response_model=UserSchema)
async def read_user(
    identifier: str,
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
) -> Any:
    """Looks a user up by id or by handle."""
    user = await user_service.find_by_identifier(db, identifier)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"User {identifier} not found")
    return user


@router.put("/", response_model=UserSchema)
async def update_user(
    user_in: UserUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
) -> Any:
    """
    Updates the caller's profile. ADMINs may pass another user's `id` and
    change `role` or `is_blocked`.
    """
    return await user_service.update(db, obj_in=user_in, requester_id=current_user.id)


@router.delete("/{user_id}", response_model=DeletedUser)
async def delete_user(
    user_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
) -> Any:
    if not user_service.is_uuid(user_id):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="User id must be a UUID")
    deleted_id = await user_service.delete(db, target_id=user_id, requester_id=current_user.id)
    return DeletedUser(id=deleted_id)
