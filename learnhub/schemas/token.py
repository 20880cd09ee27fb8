# learnhub/schemas/token.py
from pydantic import BaseModel
from pydantic.alias_generators import to_camel
from typing import Optional
from datetime import datetime


class TokenPayload(BaseModel):
    id: str | None = None
    exp: int | None = None
    token_type: str | None = None
    role: str | None = None


class AccessTokenResponse(BaseModel):
    access_token: str

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class CheckAuthResponse(BaseModel):
    status: bool
    access_token: Optional[str] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class LogoutResponse(BaseModel):
    status: bool = True


class RefreshSession(BaseModel):
    """An active refresh token of the current user, as listed by /auth/sessions."""
    id: int
    user_agent: str
    expires_at: datetime
    created_at: Optional[datetime] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True
