from typing import Any

from pydantic import BaseModel, Field

from src.ty_referral.domain.models import ReferralResult


class ClaimReferralRequest(BaseModel):
    referrer_id: str = Field(..., min_length=1, max_length=64)
    referred_id: str = Field(..., min_length=1, max_length=64)
    referred_username: str | None = Field(default=None, max_length=128)


class ClaimReferralByUsernameRequest(BaseModel):
    inviter_username: str = Field(..., min_length=1, max_length=129)  # optional leading @
    referred_id: str = Field(..., min_length=1, max_length=64)
    referred_username: str | None = Field(default=None, max_length=128)


class ReferralResponse(BaseModel):
    outcome: str
    referrer_id: str
    referred_id: str
    inviter_username: str | None = None
    created: bool = False
    awarded: bool = False
    bonus: int = 0
    inviter_balance: int | None = None

    @classmethod
    def from_result(cls, result: ReferralResult) -> "ReferralResponse":
        payload: dict[str, Any] = result.payload or {}
        return cls(
            outcome=result.outcome.value,
            referrer_id=result.referrer_id,
            referred_id=result.referred_id,
            inviter_username=payload.get("inviter_username"),
            created=bool(payload.get("created", False)),
            awarded=bool(payload.get("awarded", False)),
            bonus=int(payload.get("bonus", 0) or 0),
            inviter_balance=payload.get("inviter_balance"),
        )
