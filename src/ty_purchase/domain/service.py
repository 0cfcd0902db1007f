"""Purchase Engine: debit coins, grant asset units, bump the global aggregate.

Within one transaction:
  1. lock the account row (SELECT ... FOR UPDATE)
  2. read the current quantity (missing key = 0) and check funds
  3. debit balance and set assets[asset] = old + quantity
  4. asset_totals += total_cost (upsert, incremental)
  5. append a PURCHASE ledger entry (negative amount)

Concurrent purchases on one account serialize on the row lock, so each one
sees the balance left by the previous commit.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.ty_account.domain.repository import AccountRepositoryProtocol
from src.ty_account.infrastructure.persistence import AccountRepository
from src.ty_catalog.infrastructure.persistence import AssetTotalsRepository
from src.ty_common.enums import LedgerEntryType
from src.ty_common.errors import (
    AccountNotFoundError,
    InsufficientFundsError,
    InvalidQuantityError,
)
from src.ty_purchase.domain.models import PurchaseResult
from src.ty_purchase.domain.validation import BIGINT_MAX, validate_purchase
from src.ty_purchase.infrastructure.persistence import PurchaseRepository

logger = logging.getLogger(__name__)


class PurchaseEngine:
    def __init__(
        self,
        account_repo: AccountRepositoryProtocol | None = None,
        purchase_repo: PurchaseRepository | None = None,
        totals_repo: AssetTotalsRepository | None = None,
    ) -> None:
        self._accounts: AccountRepositoryProtocol = account_repo or AccountRepository()
        self._purchases = purchase_repo or PurchaseRepository()
        self._totals = totals_repo or AssetTotalsRepository()

    async def purchase(
        self,
        db: AsyncSession,
        account_id: str,
        asset_id: str,
        quantity: int,
        unit_cost: int,
    ) -> PurchaseResult:
        asset = validate_purchase(asset_id, quantity, unit_cost)
        total_cost = unit_cost * quantity

        account = await self._accounts.lock_account(db, account_id)
        if account is None:
            raise AccountNotFoundError(account_id)
        if account.balance < total_cost:
            raise InsufficientFundsError(total_cost, account.balance)
        new_quantity = account.quantity_of(asset) + quantity
        if new_quantity > BIGINT_MAX:
            raise InvalidQuantityError(
                quantity, f"Holding of {asset} would exceed the 64-bit range"
            )

        written = await self._purchases.debit_and_grant(
            db, account_id, asset, total_cost, new_quantity
        )
        if written is None:
            raise InsufficientFundsError(total_cost, account.balance)
        new_balance, new_quantity = written

        total_invested, _ = await self._totals.add_investment(db, asset, total_cost, quantity)
        entry = await self._accounts.append_ledger(
            db,
            account_id,
            LedgerEntryType.PURCHASE.value,
            -total_cost,
            new_balance,
            asset,
            f"Bought {quantity} x {asset} @{unit_cost}",
        )
        logger.info(
            "Purchase: account=%s asset=%s qty=%d cost=%d balance=%d",
            account_id, asset, quantity, total_cost, new_balance,
        )
        return PurchaseResult(
            account_id=account_id,
            asset_id=asset,
            quantity=quantity,
            unit_cost=unit_cost,
            total_cost=total_cost,
            new_balance=new_balance,
            new_quantity=new_quantity,
            total_invested=total_invested,
            ledger_entry_id=entry.id,
        )
