"""Global Asset Aggregate: incremental network-wide totals per asset type.

`add_investment` runs inside the purchase transaction, so the aggregate moves
together with the account debit. There is no scan-based recomputation here.
"""

from sqlalchemy import select, text
from sqlalchemy.ext.asyncio import AsyncSession

from src.ty_catalog.infrastructure.db_models import AssetTotalORM
from src.ty_common.errors import InternalError

_ADD_INVESTMENT_SQL = text("""
    INSERT INTO asset_totals (asset_id, total_invested, units_purchased)
    VALUES (:asset_id, :amount, :quantity)
    ON CONFLICT (asset_id) DO UPDATE
        SET total_invested  = asset_totals.total_invested  + EXCLUDED.total_invested,
            units_purchased = asset_totals.units_purchased + EXCLUDED.units_purchased
    RETURNING total_invested, units_purchased
""")


class AssetTotalsRepository:
    async def add_investment(
        self, db: AsyncSession, asset_id: str, amount: int, quantity: int
    ) -> tuple[int, int]:
        """Returns (total_invested, units_purchased) after the increment."""
        result = await db.execute(
            _ADD_INVESTMENT_SQL,
            {"asset_id": asset_id, "amount": amount, "quantity": quantity},
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("asset_totals upsert returned no rows")
        return int(row.total_invested), int(row.units_purchased)

    async def list_totals(self, db: AsyncSession) -> dict[str, tuple[int, int]]:
        result = await db.execute(select(AssetTotalORM).order_by(AssetTotalORM.asset_id))
        return {
            t.asset_id: (t.total_invested, t.units_purchased)
            for t in result.scalars().all()
        }
