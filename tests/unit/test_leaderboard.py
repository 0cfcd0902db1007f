"""Unit tests for the leaderboard reader."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

from src.ty_leaderboard.application.service import LeaderboardService, clamp_limit


def _db_returning(rows):
    result = MagicMock()
    result.scalars.return_value.all.return_value = rows
    db = MagicMock()
    db.execute = AsyncMock(return_value=result)
    return db


class TestClampLimit:
    def test_default(self) -> None:
        assert clamp_limit(None) == 20
        assert clamp_limit(0) == 20

    def test_capped(self) -> None:
        assert clamp_limit(500) == 100

    def test_passthrough(self) -> None:
        assert clamp_limit(5) == 5


class TestTop:
    async def test_rows_carry_position_and_level(self) -> None:
        db = _db_returning([
            SimpleNamespace(id="1", username="whale", balance=800_000, assets={"APPLE": 9}),
            SimpleNamespace(id="2", username=None, balance=50, assets={}),
        ])

        result = await LeaderboardService().top(db, 500)

        assert result.limit == 100
        assert [e.position for e in result.items] == [1, 2]
        assert result.items[0].rank == "CEO TOTO"
        assert result.items[0].level == 5
        assert result.items[1].username is None
        assert result.items[1].rank == "Intern"

    async def test_query_orders_by_balance_then_id(self) -> None:
        db = _db_returning([])

        await LeaderboardService().top(db)

        sql = str(db.execute.await_args.args[0]).lower()
        assert "order by accounts.balance desc, accounts.id asc" in sql
