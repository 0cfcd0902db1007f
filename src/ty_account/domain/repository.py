"""Repository Protocol: dependency inversion for testability.

Unit tests inject a mock that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.ty_account.domain.models import Account, LedgerEntry


class AccountRepositoryProtocol(Protocol):
    async def get_account(self, db: AsyncSession, account_id: str) -> Account | None: ...

    async def lock_account(self, db: AsyncSession, account_id: str) -> Account | None: ...

    async def find_account_id_by_username(
        self, db: AsyncSession, username: str
    ) -> str | None: ...

    async def insert_account_if_absent(
        self,
        db: AsyncSession,
        account_id: str,
        username: str,
        balance: int,
        subscribed: bool,
    ) -> Account | None: ...

    async def fill_missing_username(
        self, db: AsyncSession, account_id: str, username: str
    ) -> Account | None: ...

    async def update_profile(
        self,
        db: AsyncSession,
        account_id: str,
        username: str | None,
        subscribed: bool | None,
    ) -> Account | None: ...

    async def append_ledger(
        self,
        db: AsyncSession,
        account_id: str,
        entry_type: str,
        amount: int,
        balance_after: int,
        reference_id: str | None,
        note: str | None,
    ) -> LedgerEntry: ...

    async def list_ledger_entries(
        self,
        db: AsyncSession,
        account_id: str,
        cursor_id: int | None,
        limit: int,
        entry_type: str | None,
    ) -> list[LedgerEntry]: ...
