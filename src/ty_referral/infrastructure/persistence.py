"""ReferralRepository: idempotency ledger plus the referral-only account writes.

This module is the only place that writes accounts.referred_by and
accounts.referral_count. Statements run in the caller's transaction.
"""

import json
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.ty_account.domain.models import Account
from src.ty_account.infrastructure.persistence import ACCOUNT_COLUMNS, row_to_account
from src.ty_common.errors import InternalError
from src.ty_referral.domain.models import ReferralAttempt

_ATTEMPT_COLUMNS = "id, referrer_id, referred_id, status, details"

# Concurrent inserts of the same pair block on the unique index until the
# first transaction ends, then fall through to DO NOTHING.
_OPEN_ATTEMPT_SQL = text(f"""
    INSERT INTO referral_attempts (referrer_id, referred_id, referred_username)
    VALUES (:referrer_id, :referred_id, :referred_username)
    ON CONFLICT (referrer_id, referred_id) DO NOTHING
    RETURNING {_ATTEMPT_COLUMNS}
""")

_LOCK_ATTEMPT_SQL = text(f"""
    SELECT {_ATTEMPT_COLUMNS}
    FROM referral_attempts
    WHERE referrer_id = :referrer_id AND referred_id = :referred_id
    FOR UPDATE
""")

_FINISH_ATTEMPT_SQL = text("""
    UPDATE referral_attempts
    SET status  = :status,
        details = CAST(:details AS JSONB)
    WHERE id = :attempt_id
""")

_INSERT_REFERRED_SQL = text(f"""
    INSERT INTO accounts (id, username, balance, subscribed, referred_by)
    VALUES (:account_id, :username, :balance, :subscribed, :referred_by)
    ON CONFLICT (id) DO NOTHING
    RETURNING {ACCOUNT_COLUMNS}
""")

_SET_REFERRED_BY_SQL = text("""
    UPDATE accounts
    SET referred_by = :referrer_id
    WHERE id = :referred_id
      AND referred_by IS NULL
      AND id <> :referrer_id
    RETURNING id
""")

_CREDIT_REFERRER_SQL = text("""
    UPDATE accounts
    SET balance        = balance + :bonus,
        referral_count = referral_count + 1
    WHERE id = :referrer_id
    RETURNING balance, referral_count
""")


def _decode_details(raw: Any) -> dict[str, Any]:
    if raw is None:
        return {}
    if isinstance(raw, str):
        return json.loads(raw) if raw else {}
    return dict(raw)


def _row_to_attempt(row: object) -> ReferralAttempt:
    return ReferralAttempt(
        id=row.id,  # type: ignore[attr-defined]
        referrer_id=row.referrer_id,  # type: ignore[attr-defined]
        referred_id=row.referred_id,  # type: ignore[attr-defined]
        status=row.status,  # type: ignore[attr-defined]
        details=_decode_details(row.details),  # type: ignore[attr-defined]
    )


class ReferralRepository:
    async def open_attempt(
        self,
        db: AsyncSession,
        referrer_id: str,
        referred_id: str,
        referred_username: str | None,
    ) -> ReferralAttempt | None:
        """Insert the pair; None means the pair already has a ledger row."""
        result = await db.execute(
            _OPEN_ATTEMPT_SQL,
            {
                "referrer_id": referrer_id,
                "referred_id": referred_id,
                "referred_username": referred_username,
            },
        )
        row = result.fetchone()
        return _row_to_attempt(row) if row else None

    async def lock_attempt(
        self, db: AsyncSession, referrer_id: str, referred_id: str
    ) -> ReferralAttempt | None:
        result = await db.execute(
            _LOCK_ATTEMPT_SQL, {"referrer_id": referrer_id, "referred_id": referred_id}
        )
        row = result.fetchone()
        return _row_to_attempt(row) if row else None

    async def finish_attempt(
        self,
        db: AsyncSession,
        attempt_id: int,
        status: str,
        details: dict[str, Any],
    ) -> None:
        await db.execute(
            _FINISH_ATTEMPT_SQL,
            {"attempt_id": attempt_id, "status": status, "details": json.dumps(details)},
        )

    async def insert_referred_account(
        self,
        db: AsyncSession,
        account_id: str,
        username: str,
        balance: int,
        subscribed: bool,
        referrer_id: str,
    ) -> Account | None:
        """Create the referred account already linked; None if it existed."""
        result = await db.execute(
            _INSERT_REFERRED_SQL,
            {
                "account_id": account_id,
                "username": username,
                "balance": balance,
                "subscribed": subscribed,
                "referred_by": referrer_id,
            },
        )
        row = result.fetchone()
        return row_to_account(row) if row else None

    async def set_referred_by(
        self, db: AsyncSession, referred_id: str, referrer_id: str
    ) -> bool:
        result = await db.execute(
            _SET_REFERRED_BY_SQL, {"referred_id": referred_id, "referrer_id": referrer_id}
        )
        return result.fetchone() is not None

    async def credit_referrer(
        self, db: AsyncSession, referrer_id: str, bonus: int
    ) -> tuple[int, int]:
        """Returns (new_balance, referral_count)."""
        result = await db.execute(
            _CREDIT_REFERRER_SQL, {"referrer_id": referrer_id, "bonus": bonus}
        )
        row = result.fetchone()
        if row is None:
            raise InternalError(f"Locked referrer {referrer_id} disappeared during credit")
        return int(row.balance), int(row.referral_count)
