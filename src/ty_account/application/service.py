"""AccountApplicationService: fetch-or-create, profile updates, ledger reads.

Write operations commit on success and roll back on any exception.
Reads run without an explicit transaction.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.ty_account.application.schemas import (
    AccountResponse,
    LedgerEntryItem,
    LedgerResponse,
    cursor_decode,
    cursor_encode,
)
from src.ty_account.domain.models import MAX_ACCOUNT_ID_LENGTH, Account
from src.ty_account.domain.repository import AccountRepositoryProtocol
from src.ty_account.infrastructure.persistence import AccountRepository
from src.ty_common.enums import LedgerEntryType
from src.ty_common.errors import (
    AccountIdTooLongError,
    AccountNotFoundError,
    InternalError,
    MissingAccountIdError,
    NoFieldsToUpdateError,
)

logger = logging.getLogger(__name__)


def default_username(account_id: str) -> str:
    return f"user_{account_id}"


def normalize_account_id(account_id: str) -> str:
    account_id = account_id.strip()
    if not account_id:
        raise MissingAccountIdError()
    if len(account_id) > MAX_ACCOUNT_ID_LENGTH:
        raise AccountIdTooLongError(MAX_ACCOUNT_ID_LENGTH)
    return account_id


async def create_account_if_absent(
    repo: AccountRepositoryProtocol,
    db: AsyncSession,
    account_id: str,
    username: str | None,
) -> Account | None:
    """Insert a fresh account with the starting balance; None if it already exists.

    Runs inside the caller's transaction and writes the SIGNUP_BONUS ledger row.
    """
    created = await repo.insert_account_if_absent(
        db,
        account_id,
        username or default_username(account_id),
        settings.STARTING_BALANCE,
        settings.NEW_ACCOUNT_SUBSCRIBED,
    )
    if created is not None and created.balance > 0:
        await repo.append_ledger(
            db,
            account_id,
            LedgerEntryType.SIGNUP_BONUS.value,
            created.balance,
            created.balance,
            None,
            "Starting balance",
        )
    return created


class AccountApplicationService:
    def __init__(self, repo: AccountRepositoryProtocol | None = None) -> None:
        self._repo: AccountRepositoryProtocol = repo or AccountRepository()

    async def fetch_or_create(
        self, db: AsyncSession, account_id: str, username: str | None
    ) -> AccountResponse:
        account_id = normalize_account_id(account_id)
        try:
            account = await create_account_if_absent(self._repo, db, account_id, username)
            if account is not None:
                logger.info("Account created: id=%s", account_id)
            else:
                account = await self._repo.fill_missing_username(
                    db, account_id, username or default_username(account_id)
                )
            if account is None:
                account = await self._repo.get_account(db, account_id)
            if account is None:
                raise InternalError(f"Account {account_id} vanished after upsert")
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return AccountResponse.from_account(account)

    async def get_account(self, db: AsyncSession, account_id: str) -> AccountResponse:
        account = await self._repo.get_account(db, account_id)
        if account is None:
            raise AccountNotFoundError(account_id)
        return AccountResponse.from_account(account)

    async def update_fields(
        self,
        db: AsyncSession,
        account_id: str,
        username: str | None,
        subscribed: bool | None,
    ) -> AccountResponse:
        """Only non-economic fields are writable here."""
        if username is None and subscribed is None:
            raise NoFieldsToUpdateError()
        try:
            account = await self._repo.update_profile(db, account_id, username, subscribed)
            if account is None:
                raise AccountNotFoundError(account_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return AccountResponse.from_account(account)

    async def list_ledger(
        self,
        db: AsyncSession,
        account_id: str,
        cursor: str | None,
        limit: int,
        entry_type: str | None,
    ) -> LedgerResponse:
        cursor_id = cursor_decode(cursor)
        # Fetch limit+1 to detect has_more without a COUNT(*) query
        entries = await self._repo.list_ledger_entries(
            db, account_id, cursor_id, limit + 1, entry_type
        )
        has_more = len(entries) > limit
        page = entries[:limit]

        items = [
            LedgerEntryItem(
                id=e.id,
                entry_type=e.entry_type,
                amount=e.amount,
                balance_after=e.balance_after,
                reference_id=e.reference_id,
                note=e.note,
                created_at=e.created_at.isoformat() if e.created_at else "",
            )
            for e in page
        ]

        next_cursor = cursor_encode(page[-1].id) if has_more and page else None
        return LedgerResponse(items=items, next_cursor=next_cursor, has_more=has_more)
