from dataclasses import dataclass


@dataclass(frozen=True)
class MineResult:
    account_id: str
    earned: int           # random base reward
    passive_income: int   # sum of owned assets x income
    new_balance: int
    timestamp: int        # epoch ms written to last_reward_at
    ledger_entry_id: int
