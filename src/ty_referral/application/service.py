"""ReferralApplicationService: transaction + notification around ReferralEngine.

The attempt row written for a business-rule failure is committed too, so a
rejected claim is recorded even though the caller receives an error.
The notifier runs only after a SUCCESS commit; a delivery failure is logged
and never rolls the referral back.

Claims by inviter username resolve the name first. An unknown name is reported
as inviter_not_found and writes no attempt row.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.ty_account.application.service import default_username, normalize_account_id
from src.ty_account.domain.models import MAX_ACCOUNT_ID_LENGTH
from src.ty_account.domain.repository import AccountRepositoryProtocol
from src.ty_account.infrastructure.persistence import AccountRepository
from src.ty_common.enums import ReferralOutcome
from src.ty_common.errors import (
    AlreadyReferredError,
    InviterNotFoundError,
    MissingAccountIdError,
    SelfReferralError,
)
from src.ty_referral.application.schemas import ReferralResponse
from src.ty_referral.domain.events import ReferralNotifier, ReferralSucceeded
from src.ty_referral.domain.models import ReferralResult
from src.ty_referral.domain.service import ReferralEngine
from src.ty_referral.infrastructure.notifier import RedisReferralNotifier

logger = logging.getLogger(__name__)


def raise_for_outcome(result: ReferralResult) -> None:
    """Map a failed outcome onto the AppError the transports report."""
    if result.outcome == ReferralOutcome.SELF_REFERRAL:
        raise SelfReferralError()
    if result.outcome == ReferralOutcome.INVITER_NOT_FOUND:
        raise InviterNotFoundError(result.referrer_id)
    if result.outcome == ReferralOutcome.ALREADY_REFERRED:
        raise AlreadyReferredError(result.referred_id)


def _inviter_not_found(referrer: str, referred_id: str) -> ReferralResult:
    return ReferralResult(
        ReferralOutcome.INVITER_NOT_FOUND,
        referrer,
        referred_id,
        {"error": ReferralOutcome.INVITER_NOT_FOUND.value},
    )


class ReferralApplicationService:
    def __init__(
        self,
        engine: ReferralEngine | None = None,
        notifier: ReferralNotifier | None = None,
        account_repo: AccountRepositoryProtocol | None = None,
    ) -> None:
        self._engine = engine or ReferralEngine()
        self._notifier: ReferralNotifier = notifier or RedisReferralNotifier()
        self._accounts: AccountRepositoryProtocol = account_repo or AccountRepository()

    async def claim(
        self,
        db: AsyncSession,
        referrer_id: str,
        referred_id: str,
        referred_username: str | None = None,
    ) -> ReferralResult:
        referred_id = normalize_account_id(referred_id)
        referrer_id = referrer_id.strip()
        if not referrer_id:
            raise MissingAccountIdError()
        if len(referrer_id) > MAX_ACCOUNT_ID_LENGTH:
            # No stored account can carry this id
            return _inviter_not_found(referrer_id, referred_id)
        try:
            result = await self._engine.claim_referral(
                db, referrer_id, referred_id, referred_username
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        if result.outcome == ReferralOutcome.SUCCESS:
            await self._notify(result, referred_username)
        return result

    async def claim_by_username(
        self,
        db: AsyncSession,
        inviter_username: str,
        referred_id: str,
        referred_username: str | None = None,
    ) -> ReferralResult:
        referred_id = normalize_account_id(referred_id)
        name = inviter_username.strip().lstrip("@").strip()
        if not name:
            raise MissingAccountIdError()
        referrer_id = await self._accounts.find_account_id_by_username(db, name)
        if referrer_id is None:
            logger.info(
                "Referral by username rejected: inviter=%s referred=%s not found",
                name, referred_id,
            )
            return _inviter_not_found(name, referred_id)
        return await self.claim(db, referrer_id, referred_id, referred_username)

    async def claim_or_raise(
        self,
        db: AsyncSession,
        referrer_id: str,
        referred_id: str,
        referred_username: str | None = None,
    ) -> ReferralResponse:
        result = await self.claim(db, referrer_id, referred_id, referred_username)
        raise_for_outcome(result)
        return ReferralResponse.from_result(result)

    async def claim_by_username_or_raise(
        self,
        db: AsyncSession,
        inviter_username: str,
        referred_id: str,
        referred_username: str | None = None,
    ) -> ReferralResponse:
        result = await self.claim_by_username(
            db, inviter_username, referred_id, referred_username
        )
        raise_for_outcome(result)
        return ReferralResponse.from_result(result)

    async def _notify(self, result: ReferralResult, referred_username: str | None) -> None:
        event = ReferralSucceeded(
            referrer_id=result.referrer_id,
            referred_id=result.referred_id,
            referred_username=referred_username or default_username(result.referred_id),
            bonus=int(result.payload.get("bonus", 0) or 0),
        )
        try:
            await self._notifier.referral_succeeded(event)
        except Exception:
            logger.warning(
                "Referral notification failed: referrer=%s referred=%s",
                result.referrer_id, result.referred_id,
                exc_info=True,
            )
