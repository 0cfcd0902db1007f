"""SQLAlchemy ORM model for the asset_totals table (migration 004)."""

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, String, func
from sqlalchemy.orm import Mapped, mapped_column

from src.ty_common.database import Base


class AssetTotalORM(Base):
    __tablename__ = "asset_totals"

    asset_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    total_invested: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    units_purchased: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
