# learnhub/schemas/user.py
import uuid
from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime

from learnhub.schemas.enums import RoleName


def nick_name_validator(nick_name: Optional[str]) -> Optional[str]:
    # handles share the /user/{identifier} lookup with ids
    if nick_name is None:
        return nick_name
    try:
        uuid.UUID(nick_name)
    except ValueError:
        return nick_name
    raise ValueError("Handle must not have the shape of a user id")


class RoleResponse(BaseModel):
    name: RoleName

    class Config:
        from_attributes = True


class UserCreate(BaseModel):
    nick_name: Optional[str] = Field(None, min_length=3, max_length=64, pattern=r"^[A-Za-z0-9_.-]+$")
    display_name: Optional[str] = Field(None, max_length=150)

    @field_validator("nick_name")
    @classmethod
    def validate_nick_name(cls, v: Optional[str]) -> Optional[str]:
        return nick_name_validator(v)


class UserUpdate(BaseModel):
    """Profile update. `id` defaults to the caller; `is_blocked` and `role` are admin-only."""
    id: Optional[str] = None
    nick_name: Optional[str] = Field(None, min_length=3, max_length=64, pattern=r"^[A-Za-z0-9_.-]+$")
    display_name: Optional[str] = Field(None, max_length=150)
    is_blocked: Optional[bool] = None
    role: Optional[RoleName] = None

    @field_validator("nick_name")
    @classmethod
    def validate_update_nick_name(cls, v: Optional[str]) -> Optional[str]:
        return nick_name_validator(v)


class User(BaseModel):
    id: str
    nick_name: Optional[str] = None
    display_name: Optional[str] = None
    role: Optional[RoleResponse] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class DeletedUser(BaseModel):
    id: str
