from pydantic import BaseModel, Field

from src.ty_purchase.domain.models import PurchaseResult
from src.ty_purchase.domain.validation import BIGINT_MAX


class PurchaseRequest(BaseModel):
    asset_id: str = Field(..., min_length=1, max_length=64)
    quantity: int = Field(1, le=BIGINT_MAX, description="Units to buy, must be > 0")
    unit_cost: int | None = Field(
        None, le=BIGINT_MAX, description="Coins per unit; defaults to the catalog price"
    )


class PurchaseResponse(BaseModel):
    asset_id: str
    quantity: int
    unit_cost: int
    total_cost: int
    new_balance: int
    new_quantity: int
    total_invested: int
    ledger_entry_id: int

    @classmethod
    def from_result(cls, result: PurchaseResult) -> "PurchaseResponse":
        return cls(
            asset_id=result.asset_id,
            quantity=result.quantity,
            unit_cost=result.unit_cost,
            total_cost=result.total_cost,
            new_balance=result.new_balance,
            new_quantity=result.new_quantity,
            total_invested=result.total_invested,
            ledger_entry_id=result.ledger_entry_id,
        )
