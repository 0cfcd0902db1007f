"""Tests for ty_account cursor helpers and AccountResponse."""

from datetime import UTC, datetime

from src.ty_account.application.schemas import AccountResponse, cursor_decode, cursor_encode
from src.ty_account.domain.models import Account


class TestCursor:
    def test_encode_decode(self) -> None:
        assert cursor_decode(cursor_encode(12345)) == 12345

    def test_none(self) -> None:
        assert cursor_decode(None) is None

    def test_garbage_returns_none(self) -> None:
        assert cursor_decode("not-base64!!") is None
        assert cursor_decode("e30=") is None  # "{}"


class TestAccountResponse:
    def test_level_and_rank_are_derived(self) -> None:
        account = Account(
            id="7",
            username="alice",
            balance=15_000,
            assets={"APPLE": 2},
            created_at=datetime(2026, 1, 1, tzinfo=UTC),
        )
        resp = AccountResponse.from_account(account)
        assert resp.level == 3
        assert resp.rank == "CEO"
        assert resp.assets == {"APPLE": 2}
        assert resp.created_at == "2026-01-01T00:00:00+00:00"
