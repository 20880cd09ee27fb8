# learnhub/models/provider.py
from sqlalchemy import String, DateTime, func, ForeignKey, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime

from learnhub.db.base import Base


class ProviderType(Base):
    __tablename__ = "provider_types"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    # One of ProviderTypeName; rows are seeded at startup
    name: Mapped[str] = mapped_column(String(32), unique=True, nullable=False)


class Provider(Base):
    """Links a local user to an identity at an external provider."""
    __tablename__ = "providers"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    provider_type_id: Mapped[int] = mapped_column(ForeignKey("provider_types.id"), nullable=False)
    provider_user_id: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=func.now())

    __table_args__ = (
        UniqueConstraint("provider_user_id", "provider_type_id", name="uq_providers_external_identity"),
    )


class ProviderToken(Base):
    """Last token received from the external identity provider."""
    __tablename__ = "provider_tokens"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    provider_id: Mapped[int] = mapped_column(ForeignKey("providers.id", ondelete="CASCADE"), nullable=False)
    provider_type_id: Mapped[int] = mapped_column(ForeignKey("provider_types.id"), nullable=False)
    provider_token: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=func.now())
