"""Pydantic schemas and cursor utilities for ty_account API."""

import base64
import json

from pydantic import BaseModel, Field

from src.ty_account.domain.levels import level_for_balance, rank_label
from src.ty_account.domain.models import Account

# ---------------------------------------------------------------------------
# Cursor-based pagination utilities
# ---------------------------------------------------------------------------


def cursor_encode(last_id: int) -> str:
    """Encode a BIGINT primary key into an opaque Base64 cursor string."""
    payload = json.dumps({"id": last_id})
    return base64.b64encode(payload.encode()).decode()


def cursor_decode(cursor: str | None) -> int | None:
    """Decode a cursor string back to the last seen id. Returns None on error."""
    if cursor is None:
        return None
    try:
        payload = json.loads(base64.b64decode(cursor.encode()).decode())
        return int(payload["id"])
    except (ValueError, KeyError, TypeError):
        return None


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class FetchOrCreateAccountRequest(BaseModel):
    id: str = Field(..., min_length=1, max_length=64, description="External identity")
    username: str | None = Field(None, max_length=128)


class UpdateAccountRequest(BaseModel):
    username: str | None = Field(None, min_length=1, max_length=128)
    subscribed: bool | None = None


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class AccountResponse(BaseModel):
    id: str
    username: str | None
    balance: int
    assets: dict[str, int]
    level: int
    rank: str
    last_reward_at: int
    referred_by: str | None
    referral_count: int
    subscribed: bool
    created_at: str | None  # ISO8601 string

    @classmethod
    def from_account(cls, account: Account) -> "AccountResponse":
        return cls(
            id=account.id,
            username=account.username,
            balance=account.balance,
            assets=dict(account.assets),
            level=level_for_balance(account.balance),
            rank=rank_label(account.balance),
            last_reward_at=account.last_reward_at,
            referred_by=account.referred_by,
            referral_count=account.referral_count,
            subscribed=account.subscribed,
            created_at=account.created_at.isoformat() if account.created_at else None,
        )


class LedgerEntryItem(BaseModel):
    id: int
    entry_type: str
    amount: int
    balance_after: int
    reference_id: str | None
    note: str | None
    created_at: str  # ISO8601 string


class LedgerResponse(BaseModel):
    items: list[LedgerEntryItem]
    next_cursor: str | None
    has_more: bool
