"""Unit tests for the mining, purchase and asset-total write statements."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from src.ty_catalog.infrastructure.persistence import AssetTotalsRepository
from src.ty_common.errors import InternalError
from src.ty_mining.infrastructure.persistence import MiningRepository
from src.ty_purchase.infrastructure.persistence import PurchaseRepository


def _db_returning(row):
    result = MagicMock()
    result.fetchone.return_value = row
    db = MagicMock()
    db.execute = AsyncMock(return_value=result)
    return db


class TestApplyReward:
    async def test_returns_balance_and_timestamp(self) -> None:
        row = MagicMock()
        row.balance = 105
        row.last_reward_at = 1_000
        db = _db_returning(row)

        assert await MiningRepository().apply_reward(db, "u", 5, 1_000) == (105, 1_000)
        assert "GREATEST(last_reward_at" in str(db.execute.await_args.args[0])

    async def test_missing_row(self) -> None:
        with pytest.raises(InternalError):
            await MiningRepository().apply_reward(_db_returning(None), "u", 5, 1_000)


class TestDebitAndGrant:
    async def test_returns_new_quantity_from_assets(self) -> None:
        row = MagicMock()
        row.balance = 0
        row.assets = {"APPLE": 4}
        db = _db_returning(row)

        assert await PurchaseRepository().debit_and_grant(db, "u", "APPLE", 1000, 4) == (0, 4)
        assert "balance >= :total_cost" in str(db.execute.await_args.args[0])

    async def test_guard_miss_returns_none(self) -> None:
        assert await PurchaseRepository().debit_and_grant(
            _db_returning(None), "u", "APPLE", 1000, 1
        ) is None


class TestAddInvestment:
    async def test_returns_running_totals(self) -> None:
        row = MagicMock()
        row.total_invested = 5000
        row.units_purchased = 5
        db = _db_returning(row)

        assert await AssetTotalsRepository().add_investment(db, "APPLE", 1000, 1) == (5000, 5)
        params = db.execute.await_args.args[1]
        assert params == {"asset_id": "APPLE", "amount": 1000, "quantity": 1}
