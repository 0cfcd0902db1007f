"""Leaderboard reader: accounts ordered by balance DESC, ties broken by id ASC.

Read-only. A concurrent engine call may or may not be reflected.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.ty_account.domain.levels import level_for_balance, rank_label
from src.ty_account.infrastructure.db_models import AccountORM
from src.ty_account.infrastructure.persistence import decode_assets
from src.ty_leaderboard.application.schemas import LeaderboardEntry, LeaderboardResponse


def clamp_limit(limit: int | None) -> int:
    if limit is None or limit <= 0:
        return settings.LEADERBOARD_DEFAULT_LIMIT
    return min(limit, settings.LEADERBOARD_MAX_LIMIT)


class LeaderboardService:
    async def top(self, db: AsyncSession, limit: int | None = None) -> LeaderboardResponse:
        capped = clamp_limit(limit)
        result = await db.execute(
            select(AccountORM)
            .order_by(AccountORM.balance.desc(), AccountORM.id.asc())
            .limit(capped)
        )
        items = [
            LeaderboardEntry(
                position=i,
                id=a.id,
                username=a.username,
                balance=a.balance,
                assets=decode_assets(a.assets),
                level=level_for_balance(a.balance),
                rank=rank_label(a.balance),
            )
            for i, a in enumerate(result.scalars().all(), start=1)
        ]
        return LeaderboardResponse(items=items, limit=capped)
