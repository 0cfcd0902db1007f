"""Unit tests for ReferralEngine with mocked repositories."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from src.ty_account.domain.models import Account
from src.ty_common.enums import ReferralOutcome
from src.ty_common.errors import InternalError
from src.ty_referral.domain.models import ReferralAttempt
from src.ty_referral.domain.service import ReferralEngine


def _attempt(status: str = "PENDING", details: dict | None = None) -> ReferralAttempt:
    return ReferralAttempt(
        id=1, referrer_id="A", referred_id="B", status=status, details=details or {}
    )


def _inviter(balance: int = 500) -> Account:
    return Account(id="A", username="alice", balance=balance)


def _engine():
    account_repo = AsyncMock()
    referral_repo = AsyncMock()
    referral_repo.open_attempt.return_value = _attempt()
    referral_repo.credit_referrer.return_value = (600, 1)
    engine = ReferralEngine(
        account_repo=account_repo,
        referral_repo=referral_repo,
        bonus=100,
        starting_balance=100,
        new_account_subscribed=False,
    )
    return engine, account_repo, referral_repo


def _ledger_types(account_repo: AsyncMock) -> list[str]:
    return [c.args[2] for c in account_repo.append_ledger.await_args_list]


class TestSuccess:
    async def test_new_referred_account_created_linked(self) -> None:
        engine, account_repo, referral_repo = _engine()
        account_repo.lock_account.side_effect = [_inviter(), None]
        referral_repo.insert_referred_account.return_value = Account(
            id="B", username="bob", balance=100, referred_by="A"
        )

        result = await engine.claim_referral(MagicMock(), "A", "B", "bob")

        assert result.outcome == ReferralOutcome.SUCCESS
        assert result.payload["created"] is True
        assert result.payload["inviter_balance"] == 600
        assert result.payload["inviter_username"] == "alice"
        referral_repo.credit_referrer.assert_awaited_once()
        assert referral_repo.credit_referrer.await_args.args[1:] == ("A", 100)
        assert _ledger_types(account_repo) == ["SIGNUP_BONUS", "REFERRAL_BONUS"]
        finish = referral_repo.finish_attempt.await_args.args
        assert finish[2] == "SUCCESS"
        assert finish[3]["awarded"] is True
        referral_repo.set_referred_by.assert_not_awaited()

    async def test_existing_unlinked_account_gets_linked(self) -> None:
        engine, account_repo, referral_repo = _engine()
        account_repo.lock_account.side_effect = [
            _inviter(),
            Account(id="B", username="bob", balance=40),
        ]
        referral_repo.set_referred_by.return_value = True

        result = await engine.claim_referral(MagicMock(), "A", "B", None)

        assert result.outcome == ReferralOutcome.SUCCESS
        assert result.payload["created"] is False
        referral_repo.set_referred_by.assert_awaited_once()
        referral_repo.insert_referred_account.assert_not_awaited()
        assert [c.args[1] for c in account_repo.lock_account.await_args_list] == ["A", "B"]
        assert _ledger_types(account_repo) == ["REFERRAL_BONUS"]

    async def test_generated_username_for_new_account(self) -> None:
        engine, account_repo, referral_repo = _engine()
        account_repo.lock_account.side_effect = [_inviter(), None]
        referral_repo.insert_referred_account.return_value = Account(
            id="B", username="user_B", balance=100, referred_by="A"
        )

        await engine.claim_referral(MagicMock(), "A", "B", None)

        assert referral_repo.insert_referred_account.await_args.args[2] == "user_B"


class TestIdempotency:
    async def test_replay_returns_stored_payload(self) -> None:
        engine, account_repo, referral_repo = _engine()
        stored = {"inviter_id": "A", "awarded": True, "bonus": 100, "inviter_balance": 600}
        referral_repo.open_attempt.return_value = None
        referral_repo.lock_attempt.return_value = _attempt("SUCCESS", stored)

        result = await engine.claim_referral(MagicMock(), "A", "B", "bob")

        assert result.outcome == ReferralOutcome.ALREADY_APPLIED
        assert result.payload == stored
        account_repo.lock_account.assert_not_awaited()
        referral_repo.credit_referrer.assert_not_awaited()
        referral_repo.finish_attempt.assert_not_awaited()

    async def test_previously_failed_pair_is_retried(self) -> None:
        engine, account_repo, referral_repo = _engine()
        referral_repo.open_attempt.return_value = None
        referral_repo.lock_attempt.return_value = _attempt("inviter_not_found")
        account_repo.lock_account.side_effect = [_inviter(), None]
        referral_repo.insert_referred_account.return_value = Account(
            id="B", username="bob", balance=100, referred_by="A"
        )

        result = await engine.claim_referral(MagicMock(), "A", "B", "bob")

        assert result.outcome == ReferralOutcome.SUCCESS
        referral_repo.credit_referrer.assert_awaited_once()
        stored = referral_repo.finish_attempt.await_args.args[3]
        assert stored["previous_status"] == "inviter_not_found"
        assert "previous_status" not in result.payload

    async def test_prelinked_pair_is_recorded_without_bonus(self) -> None:
        engine, account_repo, referral_repo = _engine()
        account_repo.lock_account.side_effect = [
            _inviter(),
            Account(id="B", username="bob", balance=100, referred_by="A"),
        ]
        referral_repo.insert_referred_account.return_value = None

        result = await engine.claim_referral(MagicMock(), "A", "B", "bob")

        assert result.outcome == ReferralOutcome.ALREADY_APPLIED
        assert result.payload["awarded"] is False
        referral_repo.credit_referrer.assert_not_awaited()
        assert referral_repo.finish_attempt.await_args.args[2] == "SUCCESS"

    async def test_conflict_without_row_is_internal_error(self) -> None:
        engine, _, referral_repo = _engine()
        referral_repo.open_attempt.return_value = None
        referral_repo.lock_attempt.return_value = None

        with pytest.raises(InternalError):
            await engine.claim_referral(MagicMock(), "A", "B", "bob")


class TestRejections:
    async def test_self_referral(self) -> None:
        engine, account_repo, referral_repo = _engine()
        referral_repo.open_attempt.return_value = ReferralAttempt(
            id=2, referrer_id="A", referred_id="A", status="PENDING"
        )

        result = await engine.claim_referral(MagicMock(), "A", "A", "alice")

        assert result.outcome == ReferralOutcome.SELF_REFERRAL
        assert not result.applied
        account_repo.lock_account.assert_not_awaited()
        assert referral_repo.finish_attempt.await_args.args[2] == "self_referral"

    async def test_inviter_not_found(self) -> None:
        engine, account_repo, referral_repo = _engine()
        account_repo.lock_account.return_value = None

        result = await engine.claim_referral(MagicMock(), "A", "B", "bob")

        assert result.outcome == ReferralOutcome.INVITER_NOT_FOUND
        referral_repo.insert_referred_account.assert_not_awaited()
        referral_repo.credit_referrer.assert_not_awaited()
        account_repo.append_ledger.assert_not_awaited()

    async def test_already_referred_by_someone_else(self) -> None:
        engine, account_repo, referral_repo = _engine()
        account_repo.lock_account.side_effect = [
            _inviter(),
            Account(id="B", username="bob", balance=100, referred_by="C"),
        ]
        referral_repo.insert_referred_account.return_value = None

        result = await engine.claim_referral(MagicMock(), "A", "B", "bob")

        assert result.outcome == ReferralOutcome.ALREADY_REFERRED
        assert result.payload["existing_referrer"] == "C"
        referral_repo.set_referred_by.assert_not_awaited()
        referral_repo.credit_referrer.assert_not_awaited()
        assert referral_repo.finish_attempt.await_args.args[2] == "already_referred"


class TestLockOrder:
    async def test_accounts_locked_in_ascending_id_order(self) -> None:
        engine, account_repo, referral_repo = _engine()
        referral_repo.open_attempt.return_value = ReferralAttempt(
            id=3, referrer_id="B", referred_id="A", status="PENDING"
        )
        account_repo.lock_account.side_effect = [
            Account(id="A", username="alice", balance=40),
            Account(id="B", username="bob", balance=500),
        ]
        referral_repo.set_referred_by.return_value = True

        result = await engine.claim_referral(MagicMock(), "B", "A", None)

        assert result.outcome == ReferralOutcome.SUCCESS
        assert result.payload["inviter_username"] == "bob"
        assert [c.args[1] for c in account_repo.lock_account.await_args_list] == ["A", "B"]
        assert referral_repo.set_referred_by.await_args.args[1:] == ("A", "B")
        assert referral_repo.credit_referrer.await_args.args[1:] == ("B", 100)

    async def test_referred_created_concurrently_is_locked_and_linked(self) -> None:
        engine, account_repo, referral_repo = _engine()
        account_repo.lock_account.side_effect = [
            _inviter(),
            None,
            Account(id="B", username="bob", balance=100),
        ]
        referral_repo.insert_referred_account.return_value = None
        referral_repo.set_referred_by.return_value = True

        result = await engine.claim_referral(MagicMock(), "A", "B", "bob")

        assert result.outcome == ReferralOutcome.SUCCESS
        assert result.payload["created"] is False
        referral_repo.set_referred_by.assert_awaited_once()
        assert _ledger_types(account_repo) == ["REFERRAL_BONUS"]

    async def test_referred_vanishing_after_conflict_is_internal_error(self) -> None:
        engine, account_repo, referral_repo = _engine()
        account_repo.lock_account.side_effect = [_inviter(), None, None]
        referral_repo.insert_referred_account.return_value = None

        with pytest.raises(InternalError):
            await engine.claim_referral(MagicMock(), "A", "B", "bob")
        referral_repo.credit_referrer.assert_not_awaited()


class TestFailureHistory:
    async def test_repeated_failure_keeps_previous_outcome(self) -> None:
        engine, account_repo, referral_repo = _engine()
        referral_repo.open_attempt.return_value = None
        referral_repo.lock_attempt.return_value = _attempt(
            "already_referred", {"error": "already_referred", "existing_referrer": "C"}
        )
        account_repo.lock_account.return_value = None

        result = await engine.claim_referral(MagicMock(), "A", "B", "bob")

        assert result.outcome == ReferralOutcome.INVITER_NOT_FOUND
        assert result.payload == {"error": "inviter_not_found"}
        finish = referral_repo.finish_attempt.await_args.args
        assert finish[2] == "inviter_not_found"
        assert finish[3]["error"] == "inviter_not_found"
        assert finish[3]["previous_status"] == "already_referred"
        assert finish[3]["previous_details"]["existing_referrer"] == "C"

    async def test_first_attempt_has_no_history(self) -> None:
        engine, account_repo, referral_repo = _engine()
        account_repo.lock_account.return_value = None

        await engine.claim_referral(MagicMock(), "A", "B", "bob")

        assert "previous_status" not in referral_repo.finish_attempt.await_args.args[3]
