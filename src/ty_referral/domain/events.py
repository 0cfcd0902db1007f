"""Referral notifications: the messaging collaborator's interface.

Delivery is best-effort and happens after commit: a failing notifier never
rolls back or changes the outcome of a referral claim.
"""

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class ReferralSucceeded:
    referrer_id: str
    referred_id: str
    referred_username: str
    bonus: int


class ReferralNotifier(Protocol):
    async def referral_succeeded(self, event: ReferralSucceeded) -> None: ...
