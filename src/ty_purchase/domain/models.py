from dataclasses import dataclass


@dataclass(frozen=True)
class PurchaseResult:
    account_id: str
    asset_id: str
    quantity: int          # units bought in this purchase
    unit_cost: int
    total_cost: int
    new_balance: int
    new_quantity: int      # units owned after the purchase
    total_invested: int    # network-wide coins invested in this asset
    ledger_entry_id: int
