"""Mining write path. Caller must hold the account row lock (lock_account)."""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.ty_common.errors import InternalError

# GREATEST keeps last_reward_at non-decreasing even if a host clock steps back
_APPLY_REWARD_SQL = text("""
    UPDATE accounts
    SET balance        = balance + :amount,
        last_reward_at = GREATEST(last_reward_at, :now_ms)
    WHERE id = :account_id
    RETURNING balance, last_reward_at
""")


class MiningRepository:
    async def apply_reward(
        self, db: AsyncSession, account_id: str, amount: int, now_ms: int
    ) -> tuple[int, int]:
        """Returns (new_balance, last_reward_at)."""
        result = await db.execute(
            _APPLY_REWARD_SQL,
            {"account_id": account_id, "amount": amount, "now_ms": now_ms},
        )
        row = result.fetchone()
        if row is None:
            raise InternalError(f"Locked account {account_id} disappeared during mine")
        return int(row.balance), int(row.last_reward_at)
