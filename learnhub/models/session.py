# learnhub/models/session.py
from sqlalchemy import DateTime, func, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime
from typing import Optional

from learnhub.db.base import Base


class Session(Base):
    """
    One OAuth login: the provider token it started from and the refresh token
    it produced. `refresh_token_id` must follow every rotation of that token.
    """
    __tablename__ = "sessions"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    provider_token_id: Mapped[int] = mapped_column(
        ForeignKey("provider_tokens.id", ondelete="CASCADE"), unique=True, nullable=False
    )
    refresh_token_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("tokens.id", ondelete="SET NULL"), unique=True, nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=func.now(), onupdate=func.now())
