"""Domain models for ty_referral, pure dataclasses."""

from dataclasses import dataclass, field
from typing import Any

from src.ty_common.enums import ReferralOutcome


@dataclass
class ReferralAttempt:
    """One idempotency-ledger row, unique per (referrer_id, referred_id)."""
    id: int
    referrer_id: str
    referred_id: str
    status: str                                  # AttemptStatus value
    details: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ReferralResult:
    outcome: ReferralOutcome
    referrer_id: str
    referred_id: str
    # success / already_applied: the original success payload; failures: context
    payload: dict[str, Any] = field(default_factory=dict)

    @property
    def applied(self) -> bool:
        return self.outcome in (ReferralOutcome.SUCCESS, ReferralOutcome.ALREADY_APPLIED)
