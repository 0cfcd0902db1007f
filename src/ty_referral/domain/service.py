"""Referral Engine: apply a (referrer, referred) relationship exactly once.

All steps run in the caller's transaction:
  1. open the pair in referral_attempts (UNIQUE (referrer_id, referred_id))
  2. pair already SUCCESS        -> already_applied with the stored payload
  3. referrer == referred        -> self_referral
  4. lock both accounts FOR UPDATE in ascending id order
     referrer missing            -> inviter_not_found
  5. create referred (linked) if missing, else: other inviter -> already_referred,
     same inviter -> already_applied, unlinked -> link it
  6. credit referrer (+bonus, referral_count + 1) and append REFERRAL_BONUS
  7. mark the attempt SUCCESS with the payload

Business-rule failures write only the attempt's failure code; no account row
is touched. A failed pair can be claimed again later, a SUCCESS pair never.
A retried attempt keeps the earlier failure under previous_status and
previous_details.
Account rows are locked in ascending id order at every call site, so crossing
claims (A invites B while B invites A) queue instead of deadlocking.
"""

import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.ty_account.application.service import default_username
from src.ty_account.domain.models import Account
from src.ty_account.domain.repository import AccountRepositoryProtocol
from src.ty_account.infrastructure.persistence import AccountRepository
from src.ty_common.enums import AttemptStatus, LedgerEntryType, ReferralOutcome
from src.ty_common.errors import InternalError
from src.ty_referral.domain.models import ReferralAttempt, ReferralResult
from src.ty_referral.infrastructure.persistence import ReferralRepository

logger = logging.getLogger(__name__)

_FAILURE_STATUS: dict[ReferralOutcome, AttemptStatus] = {
    ReferralOutcome.INVITER_NOT_FOUND: AttemptStatus.INVITER_NOT_FOUND,
    ReferralOutcome.SELF_REFERRAL: AttemptStatus.SELF_REFERRAL,
    ReferralOutcome.ALREADY_REFERRED: AttemptStatus.ALREADY_REFERRED,
}


class ReferralEngine:
    def __init__(
        self,
        account_repo: AccountRepositoryProtocol | None = None,
        referral_repo: ReferralRepository | None = None,
        bonus: int | None = None,
        starting_balance: int | None = None,
        new_account_subscribed: bool | None = None,
    ) -> None:
        self._accounts: AccountRepositoryProtocol = account_repo or AccountRepository()
        self._referrals = referral_repo or ReferralRepository()
        self._bonus = settings.REFERRAL_BONUS if bonus is None else bonus
        self._starting_balance = (
            settings.STARTING_BALANCE if starting_balance is None else starting_balance
        )
        self._subscribed = (
            settings.NEW_ACCOUNT_SUBSCRIBED
            if new_account_subscribed is None
            else new_account_subscribed
        )

    async def claim_referral(
        self,
        db: AsyncSession,
        referrer_id: str,
        referred_id: str,
        referred_username: str | None,
    ) -> ReferralResult:
        history: dict[str, Any] = {}
        attempt = await self._referrals.open_attempt(
            db, referrer_id, referred_id, referred_username
        )
        if attempt is None:
            # Blocks until any in-flight claim of the same pair has finished
            attempt = await self._referrals.lock_attempt(db, referrer_id, referred_id)
            if attempt is None:
                raise InternalError(
                    f"Referral attempt {referrer_id}->{referred_id} conflicted but not found"
                )
            if attempt.status == AttemptStatus.SUCCESS.value:
                logger.info(
                    "Referral idempotency hit: referrer=%s referred=%s",
                    referrer_id, referred_id,
                )
                return ReferralResult(
                    ReferralOutcome.ALREADY_APPLIED, referrer_id, referred_id, attempt.details
                )
            logger.info(
                "Retrying previously failed referral: referrer=%s referred=%s status=%s",
                referrer_id, referred_id, attempt.status,
            )
            history = {
                "previous_status": attempt.status,
                "previous_details": attempt.details,
            }

        if referrer_id == referred_id:
            return await self._reject(db, attempt, ReferralOutcome.SELF_REFERRAL, history)

        locked: dict[str, Account | None] = {}
        for account_id in sorted((referrer_id, referred_id)):
            locked[account_id] = await self._accounts.lock_account(db, account_id)
        referrer = locked[referrer_id]
        if referrer is None:
            return await self._reject(db, attempt, ReferralOutcome.INVITER_NOT_FOUND, history)

        referred = locked[referred_id]
        created = None
        if referred is None:
            username = referred_username or default_username(referred_id)
            created = await self._referrals.insert_referred_account(
                db, referred_id, username, self._starting_balance, self._subscribed, referrer_id
            )
            if created is None:
                # Inserted by a concurrent transaction after our lock attempt
                referred = await self._accounts.lock_account(db, referred_id)
                if referred is None:
                    raise InternalError(
                        f"Referred account {referred_id} conflicted but not found"
                    )
            elif created.balance > 0:
                await self._accounts.append_ledger(
                    db,
                    referred_id,
                    LedgerEntryType.SIGNUP_BONUS.value,
                    created.balance,
                    created.balance,
                    None,
                    "Starting balance",
                )

        if referred is not None:
            existing = (referred.referred_by or "").strip()
            if existing and existing != referrer_id:
                return await self._reject(
                    db, attempt, ReferralOutcome.ALREADY_REFERRED, history,
                    {"existing_referrer": existing},
                )
            if existing == referrer_id:
                # Linked outside this ledger row: record it, never pay twice
                payload = self._payload(
                    referrer, referred_id, referrer.balance, created=False, awarded=False
                )
                await self._referrals.finish_attempt(
                    db, attempt.id, AttemptStatus.SUCCESS.value, {**payload, **history}
                )
                return ReferralResult(
                    ReferralOutcome.ALREADY_APPLIED, referrer_id, referred_id, payload
                )
            if not await self._referrals.set_referred_by(db, referred_id, referrer_id):
                raise InternalError(f"Could not link {referred_id} to {referrer_id}")

        new_balance, _ = await self._referrals.credit_referrer(db, referrer_id, self._bonus)
        await self._accounts.append_ledger(
            db,
            referrer_id,
            LedgerEntryType.REFERRAL_BONUS.value,
            self._bonus,
            new_balance,
            referred_id,
            f"Referral bonus from {referred_id}",
        )
        payload = self._payload(
            referrer, referred_id, new_balance, created=created is not None, awarded=True
        )
        await self._referrals.finish_attempt(
            db, attempt.id, AttemptStatus.SUCCESS.value, {**payload, **history}
        )
        logger.info(
            "Referral applied: referrer=%s referred=%s created=%s balance=%d",
            referrer_id, referred_id, created is not None, new_balance,
        )
        return ReferralResult(ReferralOutcome.SUCCESS, referrer_id, referred_id, payload)

    async def _reject(
        self,
        db: AsyncSession,
        attempt: ReferralAttempt,
        outcome: ReferralOutcome,
        history: dict[str, Any],
        details: dict[str, Any] | None = None,
    ) -> ReferralResult:
        context = {"error": outcome.value, **(details or {})}
        await self._referrals.finish_attempt(
            db, attempt.id, _FAILURE_STATUS[outcome].value, {**context, **history}
        )
        logger.info(
            "Referral rejected: referrer=%s referred=%s outcome=%s",
            attempt.referrer_id, attempt.referred_id, outcome.value,
        )
        return ReferralResult(outcome, attempt.referrer_id, attempt.referred_id, context)

    def _payload(
        self,
        referrer: Account,
        referred_id: str,
        inviter_balance: int,
        created: bool,
        awarded: bool,
    ) -> dict[str, Any]:
        return {
            "inviter_id": referrer.id,
            "inviter_username": referrer.username,
            "referred_id": referred_id,
            "created": created,
            "awarded": awarded,
            "bonus": self._bonus if awarded else 0,
            "inviter_balance": inviter_balance,
        }
