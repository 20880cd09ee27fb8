# learnhub/models/token.py
from sqlalchemy import String, DateTime, func, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime

from learnhub.db.base import Base

USER_AGENT_MAX_LENGTH = 512


class Token(Base):
    """Refresh token bound to a user and the user agent it was issued to."""
    __tablename__ = "tokens"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    # SHA-256 of the refresh value, never the value itself
    token_hash: Mapped[str] = mapped_column(String(64), unique=True, index=True, nullable=False)
    user_agent: Mapped[str] = mapped_column(String(USER_AGENT_MAX_LENGTH), nullable=False, default="")
    expires_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)  # UTC naive
    created_at: Mapped[datetime] = mapped_column(DateTime, default=func.now())

    __table_args__ = (Index("ix_tokens_user_agent", "user_id", "user_agent"),)
