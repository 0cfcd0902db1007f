"""Global enums: must match DB CHECK constraints exactly."""

from enum import Enum


class LedgerEntryType(str, Enum):
    SIGNUP_BONUS = "SIGNUP_BONUS"
    MINE_REWARD = "MINE_REWARD"
    PURCHASE = "PURCHASE"
    REFERRAL_BONUS = "REFERRAL_BONUS"


class ReferralOutcome(str, Enum):
    SUCCESS = "success"
    ALREADY_APPLIED = "already_applied"
    INVITER_NOT_FOUND = "inviter_not_found"
    SELF_REFERRAL = "self_referral"
    ALREADY_REFERRED = "already_referred"


class AttemptStatus(str, Enum):
    """referral_attempts.status: PENDING while in flight, then SUCCESS or a failure code."""
    PENDING = "PENDING"
    SUCCESS = "SUCCESS"
    INVITER_NOT_FOUND = "inviter_not_found"
    SELF_REFERRAL = "self_referral"
    ALREADY_REFERRED = "already_referred"
