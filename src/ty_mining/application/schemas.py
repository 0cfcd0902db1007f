from pydantic import BaseModel

from src.ty_mining.domain.models import MineResult


class MineResponse(BaseModel):
    earned: int
    passive_income: int
    new_balance: int
    timestamp: int
    ledger_entry_id: int

    @classmethod
    def from_result(cls, result: MineResult) -> "MineResponse":
        return cls(
            earned=result.earned,
            passive_income=result.passive_income,
            new_balance=result.new_balance,
            timestamp=result.timestamp,
            ledger_entry_id=result.ledger_entry_id,
        )
