"""Domain models for ty_account, pure dataclasses with no SQLAlchemy dependency."""

from dataclasses import dataclass, field
from datetime import datetime

MAX_ACCOUNT_ID_LENGTH = 64  # accounts.id VARCHAR(64)


@dataclass
class Account:
    id: str
    username: str | None
    balance: int                                          # coins
    assets: dict[str, int] = field(default_factory=dict)  # asset id -> quantity
    last_reward_at: int = 0                               # epoch ms, 0 = never mined
    referred_by: str | None = None
    referral_count: int = 0
    subscribed: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def quantity_of(self, asset_id: str) -> int:
        return int(self.assets.get(asset_id, 0) or 0)


@dataclass
class LedgerEntry:
    id: int                          # BIGSERIAL
    account_id: str
    entry_type: str                  # LedgerEntryType value
    amount: int                      # coins, positive=income negative=expense
    balance_after: int               # balance snapshot after the operation
    reference_id: str | None = None
    note: str | None = None
    created_at: datetime | None = None
