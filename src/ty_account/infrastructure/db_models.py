"""SQLAlchemy ORM models for ty_account.

These map to existing tables created by Alembic migrations.
DO NOT add/remove columns here without a corresponding migration.
"""

from datetime import datetime

from sqlalchemy import BigInteger, Boolean, DateTime, Integer, String, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from src.ty_common.database import Base


class AccountORM(Base):
    __tablename__ = "accounts"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    username: Mapped[str | None] = mapped_column(String(128), nullable=True)
    balance: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    assets: Mapped[dict[str, int]] = mapped_column(JSONB, nullable=False, default=dict)
    last_reward_at: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    referred_by: Mapped[str | None] = mapped_column(String(64), nullable=True)
    referral_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    subscribed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

