"""Purchase write path. Caller must hold the account row lock (lock_account).

The `balance >= :total_cost` guard mirrors the engine's funds check so the
statement can never drive a balance negative.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.ty_account.infrastructure.persistence import decode_assets

_DEBIT_AND_GRANT_SQL = text("""
    UPDATE accounts
    SET balance = balance - :total_cost,
        assets  = jsonb_set(
            assets,
            ARRAY[CAST(:asset_id AS TEXT)],
            to_jsonb(CAST(:new_quantity AS BIGINT)),
            true
        )
    WHERE id = :account_id AND balance >= :total_cost
    RETURNING balance, assets
""")


class PurchaseRepository:
    async def debit_and_grant(
        self,
        db: AsyncSession,
        account_id: str,
        asset_id: str,
        total_cost: int,
        new_quantity: int,
    ) -> tuple[int, int] | None:
        """Returns (new_balance, owned_quantity), or None if funds were short."""
        result = await db.execute(
            _DEBIT_AND_GRANT_SQL,
            {
                "account_id": account_id,
                "asset_id": asset_id,
                "total_cost": total_cost,
                "new_quantity": new_quantity,
            },
        )
        row = result.fetchone()
        if row is None:
            return None
        return int(row.balance), decode_assets(row.assets).get(asset_id, new_quantity)
