"""Mining Engine: cooldown-gated reward issuance.

Per-account state is READY or COOLING, derived on every call from
last_reward_at; nothing else is stored:

    READY   --mine-->            COOLING
    COOLING --cooldown elapsed--> READY

The cooldown check and the write happen under one SELECT ... FOR UPDATE row
lock, so two simultaneous mines for the same account serialize: the second
one reads the first one's last_reward_at and is rejected with CooldownError.
"""

import logging
import random
from collections.abc import Callable

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.ty_account.domain.repository import AccountRepositoryProtocol
from src.ty_account.infrastructure.persistence import AccountRepository
from src.ty_catalog.domain.catalog import AssetCatalog, get_catalog
from src.ty_common.datetime_utils import now_ms
from src.ty_common.enums import LedgerEntryType
from src.ty_common.errors import AccountNotFoundError, CooldownError
from src.ty_mining.domain.models import MineResult
from src.ty_mining.infrastructure.persistence import MiningRepository

logger = logging.getLogger(__name__)


def retry_after_seconds(remaining_ms: int) -> int:
    """Whole seconds to wait, rounded up, never below 1."""
    return max(1, (remaining_ms + 999) // 1000)


class MiningEngine:
    def __init__(
        self,
        account_repo: AccountRepositoryProtocol | None = None,
        mining_repo: MiningRepository | None = None,
        catalog: AssetCatalog | None = None,
        clock: Callable[[], int] = now_ms,
        rng: random.Random | None = None,
        cooldown_seconds: int | None = None,
        reward_min: int | None = None,
        reward_max: int | None = None,
    ) -> None:
        self._accounts: AccountRepositoryProtocol = account_repo or AccountRepository()
        self._mining = mining_repo or MiningRepository()
        self._catalog = catalog or get_catalog()
        self._clock = clock
        self._rng = rng or random.Random()
        seconds = settings.MINE_COOLDOWN_SECONDS if cooldown_seconds is None else cooldown_seconds
        self._cooldown_ms = seconds * 1000
        self._reward_min = settings.MINE_REWARD_MIN if reward_min is None else reward_min
        self._reward_max = settings.MINE_REWARD_MAX if reward_max is None else reward_max
        if not (0 <= self._reward_min <= self._reward_max):
            raise ValueError(
                f"Invalid reward range [{self._reward_min}, {self._reward_max}]"
            )

    async def mine(self, db: AsyncSession, account_id: str) -> MineResult:
        """Issue one reward within the caller's transaction.

        Raises AccountNotFoundError or CooldownError without writing anything.
        """
        account = await self._accounts.lock_account(db, account_id)
        if account is None:
            raise AccountNotFoundError(account_id)

        now = self._clock()
        if account.last_reward_at > 0:
            elapsed = now - account.last_reward_at
            if elapsed < self._cooldown_ms:
                raise CooldownError(retry_after_seconds(self._cooldown_ms - elapsed))

        earned = self._rng.randint(self._reward_min, self._reward_max)
        passive = self._catalog.passive_income(account.assets)
        new_balance, reward_at = await self._mining.apply_reward(
            db, account_id, earned + passive, now
        )
        entry = await self._accounts.append_ledger(
            db,
            account_id,
            LedgerEntryType.MINE_REWARD.value,
            earned + passive,
            new_balance,
            None,
            f"Mined {earned} + passive {passive}",
        )
        logger.info(
            "Mine: account=%s earned=%d passive=%d balance=%d",
            account_id, earned, passive, new_balance,
        )
        return MineResult(
            account_id=account_id,
            earned=earned,
            passive_income=passive,
            new_balance=new_balance,
            timestamp=reward_at,
            ledger_entry_id=entry.id,
        )
