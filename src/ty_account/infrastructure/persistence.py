"""AccountRepository: concrete implementation of AccountRepositoryProtocol.

Reads and profile writes for the accounts table plus the append-only
ledger_entries table. Balance-mutating statements live with the engine that
owns them (mining, purchase, referral) and always run after `lock_account`.

Transaction ownership: the CALLER (application service) commits or rolls back.
"""

import json
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.ty_account.domain.models import Account, LedgerEntry
from src.ty_common.errors import InternalError

ACCOUNT_COLUMNS = """
    id, username, balance, assets, last_reward_at,
    referred_by, referral_count, subscribed, created_at, updated_at
"""

_GET_ACCOUNT_SQL = text(f"""
    SELECT {ACCOUNT_COLUMNS}
    FROM accounts
    WHERE id = :account_id
""")

_LOCK_ACCOUNT_SQL = text(f"""
    SELECT {ACCOUNT_COLUMNS}
    FROM accounts
    WHERE id = :account_id
    FOR UPDATE
""")

_FIND_BY_USERNAME_SQL = text("""
    SELECT id
    FROM accounts
    WHERE lower(username) = lower(:username)
    ORDER BY created_at, id
    LIMIT 1
""")

_INSERT_ACCOUNT_SQL = text(f"""
    INSERT INTO accounts (id, username, balance, subscribed)
    VALUES (:account_id, :username, :balance, :subscribed)
    ON CONFLICT (id) DO NOTHING
    RETURNING {ACCOUNT_COLUMNS}
""")

_FILL_USERNAME_SQL = text(f"""
    UPDATE accounts
    SET username = :username
    WHERE id = :account_id
      AND (username IS NULL OR btrim(username) = '')
    RETURNING {ACCOUNT_COLUMNS}
""")

_UPDATE_PROFILE_SQL = text(f"""
    UPDATE accounts
    SET username   = COALESCE(:username, username),
        subscribed = COALESCE(:subscribed, subscribed)
    WHERE id = :account_id
    RETURNING {ACCOUNT_COLUMNS}
""")

_INSERT_LEDGER_SQL = text("""
    INSERT INTO ledger_entries
        (account_id, entry_type, amount, balance_after, reference_id, note)
    VALUES
        (:account_id, :entry_type, :amount, :balance_after, :reference_id, :note)
    RETURNING id, account_id, entry_type, amount, balance_after,
              reference_id, note, created_at
""")

_LIST_LEDGER_SQL = text("""
    SELECT id, account_id, entry_type, amount, balance_after,
           reference_id, note, created_at
    FROM ledger_entries
    WHERE account_id = :account_id
      AND (CAST(:cursor_id AS BIGINT) IS NULL OR id < :cursor_id)
      AND (CAST(:entry_type AS VARCHAR) IS NULL OR entry_type = :entry_type)
    ORDER BY id DESC
    LIMIT :limit
""")


def decode_assets(raw: Any) -> dict[str, int]:
    """JSONB arrives decoded from asyncpg, but tolerate a JSON string too."""
    if raw is None:
        return {}
    if isinstance(raw, str):
        raw = json.loads(raw) if raw else {}
    return {str(k): int(v or 0) for k, v in dict(raw).items()}


def row_to_account(row: object) -> Account:
    return Account(
        id=row.id,  # type: ignore[attr-defined]
        username=row.username,  # type: ignore[attr-defined]
        balance=int(row.balance or 0),  # type: ignore[attr-defined]
        assets=decode_assets(row.assets),  # type: ignore[attr-defined]
        last_reward_at=int(row.last_reward_at or 0),  # type: ignore[attr-defined]
        referred_by=row.referred_by,  # type: ignore[attr-defined]
        referral_count=int(row.referral_count or 0),  # type: ignore[attr-defined]
        subscribed=bool(row.subscribed),  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


def _row_to_ledger(row: object) -> LedgerEntry:
    return LedgerEntry(
        id=row.id,  # type: ignore[attr-defined]
        account_id=row.account_id,  # type: ignore[attr-defined]
        entry_type=row.entry_type,  # type: ignore[attr-defined]
        amount=row.amount,  # type: ignore[attr-defined]
        balance_after=row.balance_after,  # type: ignore[attr-defined]
        reference_id=row.reference_id,  # type: ignore[attr-defined]
        note=row.note,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


class AccountRepository:
    """Concrete repository: every statement runs in the caller's transaction."""

    async def get_account(self, db: AsyncSession, account_id: str) -> Account | None:
        result = await db.execute(_GET_ACCOUNT_SQL, {"account_id": account_id})
        row = result.fetchone()
        return row_to_account(row) if row else None

    async def lock_account(self, db: AsyncSession, account_id: str) -> Account | None:
        """SELECT ... FOR UPDATE: holds the row lock until the caller commits."""
        result = await db.execute(_LOCK_ACCOUNT_SQL, {"account_id": account_id})
        row = result.fetchone()
        return row_to_account(row) if row else None

    async def find_account_id_by_username(
        self, db: AsyncSession, username: str
    ) -> str | None:
        """Case-insensitive match; the oldest account wins when names collide."""
        result = await db.execute(_FIND_BY_USERNAME_SQL, {"username": username})
        row = result.fetchone()
        return row.id if row else None

    async def insert_account_if_absent(
        self,
        db: AsyncSession,
        account_id: str,
        username: str,
        balance: int,
        subscribed: bool,
    ) -> Account | None:
        """Returns the new Account, or None if the id already existed."""
        result = await db.execute(
            _INSERT_ACCOUNT_SQL,
            {
                "account_id": account_id,
                "username": username,
                "balance": balance,
                "subscribed": subscribed,
            },
        )
        row = result.fetchone()
        return row_to_account(row) if row else None

    async def fill_missing_username(
        self, db: AsyncSession, account_id: str, username: str
    ) -> Account | None:
        result = await db.execute(
            _FILL_USERNAME_SQL, {"account_id": account_id, "username": username}
        )
        row = result.fetchone()
        return row_to_account(row) if row else None

    async def update_profile(
        self,
        db: AsyncSession,
        account_id: str,
        username: str | None,
        subscribed: bool | None,
    ) -> Account | None:
        result = await db.execute(
            _UPDATE_PROFILE_SQL,
            {"account_id": account_id, "username": username, "subscribed": subscribed},
        )
        row = result.fetchone()
        return row_to_account(row) if row else None

    async def append_ledger(
        self,
        db: AsyncSession,
        account_id: str,
        entry_type: str,
        amount: int,
        balance_after: int,
        reference_id: str | None,
        note: str | None,
    ) -> LedgerEntry:
        result = await db.execute(
            _INSERT_LEDGER_SQL,
            {
                "account_id": account_id,
                "entry_type": entry_type,
                "amount": amount,
                "balance_after": balance_after,
                "reference_id": reference_id,
                "note": note,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Ledger insert returned no rows")
        return _row_to_ledger(row)

    async def list_ledger_entries(
        self,
        db: AsyncSession,
        account_id: str,
        cursor_id: int | None,
        limit: int,
        entry_type: str | None,
    ) -> list[LedgerEntry]:
        result = await db.execute(
            _LIST_LEDGER_SQL,
            {
                "account_id": account_id,
                "cursor_id": cursor_id,
                "entry_type": entry_type,
                "limit": limit,
            },
        )
        rows = result.fetchall()
        return [_row_to_ledger(row) for row in rows]
