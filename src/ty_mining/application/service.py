"""MiningApplicationService: owns the transaction around MiningEngine.mine."""

from sqlalchemy.ext.asyncio import AsyncSession

from src.ty_mining.application.schemas import MineResponse
from src.ty_mining.domain.service import MiningEngine


class MiningApplicationService:
    def __init__(self, engine: MiningEngine | None = None) -> None:
        self._engine = engine or MiningEngine()

    async def mine(self, db: AsyncSession, account_id: str) -> MineResponse:
        try:
            result = await self._engine.mine(db, account_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return MineResponse.from_result(result)
